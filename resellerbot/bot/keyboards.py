from __future__ import annotations

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup, KeyboardButton, ReplyKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder, ReplyKeyboardBuilder


ADMIN_BUTTON_ADD_SELLER = "Adicionar revendedor"
ADMIN_BUTTON_REMOVE_SELLER = "Remover revendedor"
ADMIN_BUTTON_LIST_SELLERS = "Listar revendedores"

SELLER_BUTTON_ADD_CLIENT = "Novo cliente"
SELLER_BUTTON_LIST_CLIENTS = "Meus clientes"
SELLER_BUTTON_EDIT_CLIENT = "Editar cliente"
SELLER_BUTTON_DELETE_CLIENT = "Excluir cliente"
SELLER_BUTTON_CREATE_CREDIT = "Novo crédito"
SELLER_BUTTON_LIST_CREDITS = "Créditos compartilhados"
SELLER_BUTTON_OPEN_CREDITS = "Créditos com vagas"
SELLER_BUTTON_FREE_SLOTS = "Vagas livres"
BUTTON_BACK = "Voltar"


def admin_menu_keyboard() -> ReplyKeyboardMarkup:
    kb = ReplyKeyboardBuilder()
    kb.row(
        KeyboardButton(text=ADMIN_BUTTON_ADD_SELLER),
        KeyboardButton(text=ADMIN_BUTTON_REMOVE_SELLER),
    )
    kb.row(KeyboardButton(text=ADMIN_BUTTON_LIST_SELLERS))
    return kb.as_markup(resize_keyboard=True)


def seller_menu_keyboard() -> ReplyKeyboardMarkup:
    kb = ReplyKeyboardBuilder()
    kb.row(
        KeyboardButton(text=SELLER_BUTTON_ADD_CLIENT),
        KeyboardButton(text=SELLER_BUTTON_LIST_CLIENTS),
    )
    kb.row(
        KeyboardButton(text=SELLER_BUTTON_EDIT_CLIENT),
        KeyboardButton(text=SELLER_BUTTON_DELETE_CLIENT),
    )
    kb.row(
        KeyboardButton(text=SELLER_BUTTON_CREATE_CREDIT),
        KeyboardButton(text=SELLER_BUTTON_LIST_CREDITS),
    )
    kb.row(
        KeyboardButton(text=SELLER_BUTTON_OPEN_CREDITS),
        KeyboardButton(text=SELLER_BUTTON_FREE_SLOTS),
    )
    return kb.as_markup(resize_keyboard=True)


def back_keyboard() -> ReplyKeyboardMarkup:
    kb = ReplyKeyboardBuilder()
    kb.row(KeyboardButton(text=BUTTON_BACK))
    return kb.as_markup(resize_keyboard=True)


def credit_actions_keyboard(
    panel_id: int,
    *,
    can_link: bool,
    linked_clients: list[tuple[int, str]],
) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    if can_link:
        builder.row(InlineKeyboardButton(text="➕ Vincular cliente", callback_data=f"credit_link:{panel_id}"))
    for client_id, client_name in linked_clients:
        builder.row(
            InlineKeyboardButton(
                text=f"🔗 Desvincular {client_name}",
                callback_data=f"credit_unlink:{panel_id}:{client_id}",
            )
        )
    builder.row(
        InlineKeyboardButton(text="✏️ Editar vagas", callback_data=f"credit_edit:{panel_id}"),
        InlineKeyboardButton(text="🗑 Excluir", callback_data=f"credit_delete:{panel_id}"),
    )
    return builder.as_markup()


def link_client_keyboard(panel_id: int, clients: list[tuple[int, str]]) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    for client_id, client_name in clients:
        builder.row(
            InlineKeyboardButton(text=client_name, callback_data=f"credit_pick:{panel_id}:{client_id}")
        )
    return builder.as_markup()


def slot_category_keyboard(
    panel_id: int,
    client_id: int,
    slots: list[tuple[str, int]],
    suggested: str | None,
) -> InlineKeyboardMarkup:
    """One button per category; full categories are left out."""
    builder = InlineKeyboardBuilder()
    for category, available in slots:
        if available <= 0:
            continue
        marker = "⭐ " if category == suggested else ""
        builder.row(
            InlineKeyboardButton(
                text=f"{marker}{category.upper()} ({available})",
                callback_data=f"credit_slot:{panel_id}:{client_id}:{category}",
            )
        )
    return builder.as_markup()


def credit_delete_confirm_keyboard(panel_id: int) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(
            text="✅ Confirmar exclusão",
            callback_data=f"credit_confirm_delete:{panel_id}",
        ),
        InlineKeyboardButton(
            text="❌ Cancelar",
            callback_data="credit_delete_cancel",
        ),
    )
    return builder.as_markup()
