from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from resellerbot.bot.keyboards import (
    ADMIN_BUTTON_ADD_SELLER,
    ADMIN_BUTTON_LIST_SELLERS,
    ADMIN_BUTTON_REMOVE_SELLER,
    BUTTON_BACK,
    admin_menu_keyboard,
    back_keyboard,
)
from resellerbot.bot.states import AdminStates
from resellerbot.repositories.sellers import SellerRepository


def build_admin_router(
    *,
    admin_chat_id: int,
    seller_repo: SellerRepository,
) -> Router:
    router = Router(name="admin")

    def is_admin(chat_id: int) -> bool:
        return chat_id == admin_chat_id

    async def guard_admin(message: Message) -> bool:
        if not is_admin(message.from_user.id):
            await message.answer("Esta área é exclusiva do administrador.")
            return False
        return True

    async def back_to_admin_menu(message: Message, state: FSMContext) -> None:
        await state.clear()
        await message.answer("De volta ao menu do administrador.", reply_markup=admin_menu_keyboard())

    def wants_back(message: Message) -> bool:
        return (message.text or "").strip() == BUTTON_BACK

    @router.message(Command("admin"))
    async def admin_menu(message: Message, state: FSMContext) -> None:
        if not await guard_admin(message):
            return
        await state.clear()
        await message.answer(
            "Painel do administrador. Escolha uma opção.",
            reply_markup=admin_menu_keyboard(),
        )

    @router.message(F.text == ADMIN_BUTTON_ADD_SELLER)
    async def ask_add_seller(message: Message, state: FSMContext) -> None:
        if not await guard_admin(message):
            return
        await state.set_state(AdminStates.add_seller)
        await message.answer(
            "Formato: `chat_id|nome`\n"
            "Exemplo: `123456789|Loja do João`\n"
            "Para cancelar toque em `Voltar`.",
            reply_markup=back_keyboard(),
        )

    @router.message(AdminStates.add_seller)
    async def add_seller(message: Message, state: FSMContext) -> None:
        if not await guard_admin(message):
            return
        if wants_back(message):
            await back_to_admin_menu(message, state)
            return
        raw = (message.text or "").strip()
        if "|" in raw:
            parts = [p.strip() for p in raw.split("|", 1)]
        else:
            parts = raw.split(maxsplit=1)
        if len(parts) < 2 or not parts[1].strip():
            await message.answer("Formato correto: `chat_id|nome`")
            return
        chat_raw, seller_name = parts[0], parts[1].strip()
        try:
            chat_id = int(chat_raw)
        except ValueError:
            await message.answer("chat_id deve ser numérico.")
            return

        await seller_repo.add(chat_id, seller_name)
        await state.clear()
        await message.answer(
            f"Revendedor `{seller_name}` ({chat_id}) cadastrado.",
            reply_markup=admin_menu_keyboard(),
        )

    @router.message(F.text == ADMIN_BUTTON_REMOVE_SELLER)
    async def ask_remove_seller(message: Message, state: FSMContext) -> None:
        if not await guard_admin(message):
            return
        await state.set_state(AdminStates.remove_seller)
        await message.answer(
            "Envie o chat_id do revendedor a remover.\n"
            "Atenção: créditos e clientes dele também serão apagados.\n"
            "Para cancelar toque em `Voltar`.",
            reply_markup=back_keyboard(),
        )

    @router.message(AdminStates.remove_seller)
    async def remove_seller(message: Message, state: FSMContext) -> None:
        if not await guard_admin(message):
            return
        if wants_back(message):
            await back_to_admin_menu(message, state)
            return
        try:
            chat_id = int((message.text or "").strip())
        except ValueError:
            await message.answer("chat_id deve ser numérico.")
            return

        if chat_id == admin_chat_id:
            await message.answer("O administrador não pode ser removido.")
            return

        removed = await seller_repo.remove(chat_id)
        await state.clear()
        text = f"Revendedor {chat_id} removido." if removed else f"Revendedor {chat_id} não encontrado."
        await message.answer(text, reply_markup=admin_menu_keyboard())

    @router.message(F.text == ADMIN_BUTTON_LIST_SELLERS)
    async def list_sellers(message: Message) -> None:
        if not await guard_admin(message):
            return
        sellers = await seller_repo.list_sellers()
        if not sellers:
            await message.answer("Nenhum revendedor cadastrado.")
            return
        lines = ["Revendedores:"]
        for seller in sellers:
            lines.append(f"- {seller.name or '-'} | {seller.chat_id}")
        await message.answer("\n".join(lines), reply_markup=admin_menu_keyboard())

    return router
