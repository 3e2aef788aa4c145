from aiogram.fsm.state import State, StatesGroup


class AdminStates(StatesGroup):
    add_seller = State()
    remove_seller = State()


class SellerStates(StatesGroup):
    add_client = State()
    edit_client = State()
    delete_client = State()
    create_credit = State()
    edit_credit = State()
