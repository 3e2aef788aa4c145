from __future__ import annotations

import logging

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery, Message

from resellerbot.bot.keyboards import (
    BUTTON_BACK,
    SELLER_BUTTON_ADD_CLIENT,
    SELLER_BUTTON_CREATE_CREDIT,
    SELLER_BUTTON_DELETE_CLIENT,
    SELLER_BUTTON_EDIT_CLIENT,
    SELLER_BUTTON_FREE_SLOTS,
    SELLER_BUTTON_LIST_CLIENTS,
    SELLER_BUTTON_LIST_CREDITS,
    SELLER_BUTTON_OPEN_CREDITS,
    back_keyboard,
    credit_actions_keyboard,
    credit_delete_confirm_keyboard,
    link_client_keyboard,
    seller_menu_keyboard,
    slot_category_keyboard,
)
from resellerbot.bot.states import SellerStates
from resellerbot.db import ConflictError, StorageError
from resellerbot.models import PANEL_PRESETS, SLOT_P2P, Client, PanelOccupancy, SharedCredential
from resellerbot.repositories.clients import ClientRepository
from resellerbot.repositories.sellers import SellerRepository
from resellerbot.services.allocator import AllocationError, SharedCredentialAllocator
from resellerbot.services.crypto import CredentialCipherError, CryptoService
from resellerbot.services.expiration import (
    STATUS_EXPIRED,
    STATUS_EXPIRING,
    days_until,
    expiration_status,
    parse_expiration,
    today_in,
)


logger = logging.getLogger(__name__)

MAX_LINK_CANDIDATES = 30


def parse_capacities(raw: str) -> dict[str, int]:
    """Parse ``p2p:1,iptv:2`` into an ordered category -> capacity mapping."""
    entries = [e.strip() for e in (raw or "").split(",") if e.strip()]
    if not entries:
        raise ValueError("Informe ao menos uma categoria, ex: p2p:1,iptv:2")

    result: dict[str, int] = {}
    for entry in entries:
        if ":" not in entry:
            raise ValueError(f"Formato de vaga inválido: {entry}")
        category, amount_raw = [x.strip() for x in entry.split(":", 1)]
        category = category.lower()
        if not category:
            raise ValueError(f"Categoria vazia em: {entry}")
        if category in result:
            raise ValueError(f"Categoria repetida: {category}")
        try:
            amount = int(amount_raw)
        except ValueError as exc:
            raise ValueError(f"Quantidade deve ser numérica: {entry}") from exc
        if amount < 0:
            raise ValueError(f"Quantidade não pode ser negativa: {entry}")
        result[category] = amount
    return result


def parse_credit_spec(raw: str) -> tuple[str, dict[str, int]]:
    """``nome``, ``nome|preset`` or ``nome|p2p:1,iptv:2``."""
    parts = [p.strip() for p in (raw or "").split("|", 1)]
    name = parts[0]
    if not name:
        raise ValueError("O nome do crédito é obrigatório.")
    if len(parts) == 1 or not parts[1]:
        return name, dict(PANEL_PRESETS["p2p_iptv"])

    slots = parts[1]
    preset = PANEL_PRESETS.get(slots.lower())
    if preset is not None:
        return name, dict(preset)
    return name, parse_capacities(slots)


def parse_client_edit(raw: str) -> tuple[int, str, str | None, str | None]:
    """``#id|nome|telefone|vencimento``; blank phone or due date clears it."""
    parts = [p.strip() for p in (raw or "").split("|")]
    if len(parts) < 2 or len(parts) > 4:
        raise ValueError("Formato: #id|nome|telefone|vencimento")
    parts += [""] * (4 - len(parts))
    id_raw, name, phone, expires_raw = parts
    try:
        client_id = int(id_raw.lstrip("#"))
    except ValueError as exc:
        raise ValueError("O id deve ser numérico.") from exc
    if not name:
        raise ValueError("O nome do cliente é obrigatório.")

    expires_at = None
    if expires_raw:
        try:
            expires_at = parse_expiration(expires_raw).isoformat()
        except ValueError as exc:
            raise ValueError("Vencimento inválido. Use AAAA-MM-DD ou DD/MM/AAAA.") from exc
    return client_id, name, phone or None, expires_at


def format_slots(occupancy: PanelOccupancy) -> str:
    parts = []
    for category, slot in occupancy.categories.items():
        if slot.capacity == 0 and slot.filled == 0:
            continue
        parts.append(f"{category.upper()} {slot.filled}/{slot.capacity}")
    return " · ".join(parts) if parts else "sem vagas"


def format_credit(occupancy: PanelOccupancy, revealed: SharedCredential) -> str:
    lines = [f"💳 {occupancy.panel.name}", format_slots(occupancy)]
    if occupancy.over_filled:
        lines.append("⚠️ Acima da capacidade, revise os vínculos.")
    elif occupancy.is_full:
        lines.append("✅ Completo")
    if revealed.login:
        lines.append(f"👤 Login: {revealed.login}")
    if revealed.password:
        lines.append(f"🔑 Senha: {revealed.password}")
    if occupancy.clients:
        names = ", ".join(f"{c.name} ({(c.shared_slot_type or '-').upper()})" for c in occupancy.clients)
        lines.append(f"Clientes: {names}")
    return "\n".join(lines)


def format_client_line(client: Client, *, status: str, remaining: int | None, panel_name: str | None) -> str:
    line = f"- #{client.id} {client.name}"
    if client.phone:
        line += f" | {client.phone}"
    if remaining is not None:
        if status == STATUS_EXPIRED:
            line += f" | vencido há {-remaining} dia(s)"
        elif status == STATUS_EXPIRING:
            line += f" | ⏰ vence em {remaining} dia(s)"
        else:
            line += f" | vence em {remaining} dia(s)"
    if panel_name is not None:
        line += f" | 🔗 {panel_name} ({(client.shared_slot_type or '-').upper()})"
    return line


def build_seller_router(
    *,
    admin_chat_id: int,
    seller_repo: SellerRepository,
    client_repo: ClientRepository,
    allocator: SharedCredentialAllocator,
    crypto: CryptoService,
    timezone: str,
    expiring_soon_days: int,
) -> Router:
    router = Router(name="seller")

    async def is_seller(chat_id: int) -> bool:
        if chat_id == admin_chat_id:
            return True
        return await seller_repo.is_registered(chat_id)

    async def guard_seller(message: Message) -> bool:
        if not await is_seller(message.from_user.id):
            await message.answer("Seu acesso não está ativo. Fale com o administrador.")
            return False
        return True

    async def guard_seller_callback(callback: CallbackQuery) -> bool:
        if not await is_seller(callback.from_user.id):
            await callback.answer("Acesso negado", show_alert=True)
            return False
        return True

    async def back_to_menu(message: Message, state: FSMContext) -> None:
        await state.clear()
        await message.answer("Menu principal.", reply_markup=seller_menu_keyboard())

    def wants_back(message: Message) -> bool:
        return (message.text or "").strip() == BUTTON_BACK

    def parse_ids(data: str, count: int) -> list[int] | None:
        parts = data.split(":")[1:]
        if len(parts) < count:
            return None
        try:
            return [int(p) for p in parts[:count]]
        except ValueError:
            return None

    async def send_credit(message: Message, occupancy: PanelOccupancy) -> None:
        revealed = crypto.reveal(occupancy.shared_credential)
        await message.answer(
            format_credit(occupancy, revealed),
            reply_markup=credit_actions_keyboard(
                occupancy.panel.id,
                can_link=not occupancy.is_full,
                linked_clients=[(c.id, c.name) for c in occupancy.clients],
            ),
        )

    @router.message(Command("start"))
    async def start(message: Message, state: FSMContext) -> None:
        chat_id = message.from_user.id
        await state.clear()
        if not await is_seller(chat_id):
            await message.answer(
                "Seu acesso não está ativo. Envie este chat_id ao administrador:\n"
                f"`{chat_id}`"
            )
            return
        await message.answer("Bem-vindo! Escolha uma opção.", reply_markup=seller_menu_keyboard())

    @router.message(Command("cancel"))
    async def cancel_any(message: Message, state: FSMContext) -> None:
        if not await guard_seller(message):
            return
        await back_to_menu(message, state)

    @router.message(F.text == SELLER_BUTTON_ADD_CLIENT)
    async def ask_add_client(message: Message, state: FSMContext) -> None:
        if not await guard_seller(message):
            return
        await state.set_state(SellerStates.add_client)
        await message.answer(
            "Formato: `nome|telefone|login|senha|vencimento`\n"
            "Exemplo: `Maria|11999990000|maria01|s3nh4|2026-12-31`\n"
            "Campos além do nome podem ficar vazios.\n"
            "Para cancelar toque em `Voltar`.",
            reply_markup=back_keyboard(),
        )

    @router.message(SellerStates.add_client)
    async def add_client(message: Message, state: FSMContext) -> None:
        if not await guard_seller(message):
            return
        if wants_back(message):
            await back_to_menu(message, state)
            return

        parts = [p.strip() for p in (message.text or "").split("|")]
        if len(parts) > 5:
            await message.answer("No máximo 5 campos separados por |.")
            return
        parts += [""] * (5 - len(parts))
        name, phone, login, password, expires_raw = parts
        if not name:
            await message.answer("O nome do cliente é obrigatório.")
            return

        expires_at = None
        if expires_raw:
            try:
                expires_at = parse_expiration(expires_raw).isoformat()
            except ValueError:
                await message.answer("Vencimento inválido. Use AAAA-MM-DD ou DD/MM/AAAA.")
                return

        try:
            client_id = await client_repo.create(
                seller_id=message.from_user.id,
                name=name,
                phone=phone or None,
                login_enc=crypto.encrypt(login),
                password_enc=crypto.encrypt(password),
                expires_at=expires_at,
            )
        except StorageError as exc:
            await message.answer(f"Não foi possível salvar o cliente: {exc}")
            return

        await state.clear()
        await message.answer(f"Cliente `{name}` cadastrado (#{client_id}).", reply_markup=seller_menu_keyboard())

    @router.message(F.text == SELLER_BUTTON_LIST_CLIENTS)
    async def list_clients(message: Message) -> None:
        if not await guard_seller(message):
            return
        seller_id = message.from_user.id
        clients = await client_repo.list_for_seller(seller_id)
        if not clients:
            await message.answer("Nenhum cliente cadastrado.")
            return

        occupancies = await allocator.list_panels_with_occupancy(seller_id=seller_id)
        panel_names = {o.panel.id: o.panel.name for o in occupancies}
        today = today_in(timezone)

        lines = ["Clientes:"]
        for client in clients:
            remaining = days_until(client.expires_at, today) if client.expires_at else None
            lines.append(
                format_client_line(
                    client,
                    status=expiration_status(client.expires_at, today, expiring_soon_days),
                    remaining=remaining,
                    panel_name=panel_names.get(client.shared_panel_id) if client.is_linked else None,
                )
            )
        await message.answer("\n".join(lines), reply_markup=seller_menu_keyboard())

    @router.message(F.text == SELLER_BUTTON_EDIT_CLIENT)
    async def ask_edit_client(message: Message, state: FSMContext) -> None:
        if not await guard_seller(message):
            return
        await state.set_state(SellerStates.edit_client)
        await message.answer(
            "Formato: `#id|nome|telefone|vencimento`\n"
            "Exemplo: `#3|Maria Souza|11999990000|2027-01-31`\n"
            "Telefone ou vencimento vazios são apagados.\n"
            "Para cancelar toque em `Voltar`.",
            reply_markup=back_keyboard(),
        )

    @router.message(SellerStates.edit_client)
    async def edit_client(message: Message, state: FSMContext) -> None:
        if not await guard_seller(message):
            return
        if wants_back(message):
            await back_to_menu(message, state)
            return
        try:
            client_id, name, phone, expires_at = parse_client_edit(message.text or "")
        except ValueError as exc:
            await message.answer(str(exc))
            return

        try:
            updated = await client_repo.update_details(
                client_id=client_id,
                seller_id=message.from_user.id,
                name=name,
                phone=phone,
                expires_at=expires_at,
            )
        except StorageError as exc:
            await message.answer(f"Não foi possível atualizar o cliente: {exc}")
            return
        except Exception:  # noqa: BLE001
            logger.exception("Editing client %s failed", client_id)
            await message.answer("Erro inesperado ao atualizar cliente.")
            return

        await state.clear()
        text = f"Cliente #{client_id} atualizado." if updated else f"Cliente #{client_id} não encontrado."
        await message.answer(text, reply_markup=seller_menu_keyboard())

    @router.message(F.text == SELLER_BUTTON_DELETE_CLIENT)
    async def ask_delete_client(message: Message, state: FSMContext) -> None:
        if not await guard_seller(message):
            return
        await state.set_state(SellerStates.delete_client)
        await message.answer(
            "Envie o número (#id) do cliente a excluir.\n"
            "Para cancelar toque em `Voltar`.",
            reply_markup=back_keyboard(),
        )

    @router.message(SellerStates.delete_client)
    async def delete_client(message: Message, state: FSMContext) -> None:
        if not await guard_seller(message):
            return
        if wants_back(message):
            await back_to_menu(message, state)
            return
        try:
            client_id = int((message.text or "").strip().lstrip("#"))
        except ValueError:
            await message.answer("O id deve ser numérico.")
            return

        removed = await client_repo.delete(client_id, message.from_user.id)
        await state.clear()
        text = f"Cliente #{client_id} excluído." if removed else f"Cliente #{client_id} não encontrado."
        await message.answer(text, reply_markup=seller_menu_keyboard())

    @router.message(F.text == SELLER_BUTTON_CREATE_CREDIT)
    async def ask_create_credit(message: Message, state: FSMContext) -> None:
        if not await guard_seller(message):
            return
        await state.set_state(SellerStates.create_credit)
        presets = ", ".join(PANEL_PRESETS)
        await message.answer(
            "Formato: `nome|p2p:1,iptv:2`\n"
            f"Ou use um modelo: `nome|modelo` ({presets}).\n"
            "Só o nome cria 1 vaga P2P e 2 IPTV.\n"
            "Para cancelar toque em `Voltar`.",
            reply_markup=back_keyboard(),
        )

    @router.message(SellerStates.create_credit)
    async def create_credit(message: Message, state: FSMContext) -> None:
        if not await guard_seller(message):
            return
        if wants_back(message):
            await back_to_menu(message, state)
            return
        try:
            name, capacities = parse_credit_spec(message.text or "")
        except ValueError as exc:
            await message.answer(str(exc))
            return

        try:
            panel = await allocator.create_panel(
                seller_id=message.from_user.id,
                name=name,
                capacities=capacities,
            )
        except ConflictError:
            await message.answer(f"Já existe um crédito chamado `{name}`.")
            return
        except (AllocationError, StorageError) as exc:
            await message.answer(f"Erro ao criar crédito: {exc}")
            return
        except Exception:  # noqa: BLE001
            logger.exception("Creating panel %r failed", name)
            await message.answer("Erro inesperado ao criar crédito.")
            return

        await state.clear()
        await message.answer(
            f"Crédito `{panel.name}` criado com {panel.total_slots} vaga(s).",
            reply_markup=seller_menu_keyboard(),
        )

    async def send_credits(message: Message, *, include_full: bool) -> None:
        occupancies = await allocator.list_panels_with_occupancy(
            seller_id=message.from_user.id,
            include_full=include_full,
        )
        if not occupancies:
            text = "Nenhum crédito cadastrado." if include_full else "Nenhum crédito com vagas livres."
            await message.answer(text)
            return
        for occupancy in occupancies:
            try:
                await send_credit(message, occupancy)
            except CredentialCipherError as exc:
                await message.answer(f"{occupancy.panel.name}: {exc}")

    @router.message(F.text == SELLER_BUTTON_LIST_CREDITS)
    async def list_credits(message: Message) -> None:
        if not await guard_seller(message):
            return
        await send_credits(message, include_full=True)

    @router.message(F.text == SELLER_BUTTON_OPEN_CREDITS)
    async def list_open_credits(message: Message) -> None:
        if not await guard_seller(message):
            return
        await send_credits(message, include_full=False)

    @router.message(F.text == SELLER_BUTTON_FREE_SLOTS)
    async def free_slots(message: Message) -> None:
        if not await guard_seller(message):
            return
        total = await allocator.total_available_slots(seller_id=message.from_user.id)
        await message.answer(f"Vagas livres em todos os créditos: {total}", reply_markup=seller_menu_keyboard())

    @router.callback_query(F.data.startswith("credit_link:"))
    async def choose_client_to_link(callback: CallbackQuery) -> None:
        if not await guard_seller_callback(callback):
            return
        ids = parse_ids(callback.data, 1)
        if ids is None:
            await callback.answer("Crédito inválido.", show_alert=True)
            return
        panel_id = ids[0]

        candidates = await client_repo.list_unlinked(callback.from_user.id)
        if not candidates:
            await callback.answer("Nenhum cliente livre para vincular.", show_alert=True)
            return
        shown = candidates[:MAX_LINK_CANDIDATES]
        await callback.message.answer(
            "Escolha o cliente a vincular:",
            reply_markup=link_client_keyboard(panel_id, [(c.id, c.name) for c in shown]),
        )
        await callback.answer()

    @router.callback_query(F.data.startswith("credit_pick:"))
    async def choose_slot_category(callback: CallbackQuery) -> None:
        if not await guard_seller_callback(callback):
            return
        ids = parse_ids(callback.data, 2)
        if ids is None:
            await callback.answer("Seleção inválida.", show_alert=True)
            return
        panel_id, client_id = ids

        try:
            occupancy = await allocator.get_panel_occupancy(seller_id=callback.from_user.id, panel_id=panel_id)
        except AllocationError as exc:
            await callback.answer(str(exc), show_alert=True)
            return

        # Opening the dialog prefers P2P while it has room.
        suggested = allocator.suggest_category(occupancy, current=SLOT_P2P)
        if suggested is None:
            await callback.answer("Crédito completo.", show_alert=True)
            return

        slots = [(category, slot.available) for category, slot in occupancy.categories.items()]
        text = "Escolha o tipo de vaga:"
        if occupancy.clients:
            text += "\nO login/senha do crédito será copiado para este cliente."
        else:
            text += "\nO login/senha deste cliente será compartilhado com os próximos."
        await callback.message.answer(
            text,
            reply_markup=slot_category_keyboard(panel_id, client_id, slots, suggested),
        )
        await callback.answer()

    @router.callback_query(F.data.startswith("credit_slot:"))
    async def link_client(callback: CallbackQuery) -> None:
        if not await guard_seller_callback(callback):
            return
        parts = callback.data.split(":", 3)
        ids = parse_ids(callback.data, 2)
        if ids is None or len(parts) != 4:
            await callback.answer("Seleção inválida.", show_alert=True)
            return
        panel_id, client_id = ids
        category = parts[3]
        seller_id = callback.from_user.id

        try:
            shared = await allocator.get_shared_credential(seller_id=seller_id, panel_id=panel_id)
            occupancy = await allocator.link_client(
                seller_id=seller_id,
                panel_id=panel_id,
                client_id=client_id,
                category=category,
                shared=shared,
            )
        except (AllocationError, StorageError) as exc:
            await callback.answer(f"Erro ao vincular: {exc}", show_alert=True)
            return
        except Exception:  # noqa: BLE001
            logger.exception("Linking client %s to panel %s failed", client_id, panel_id)
            await callback.answer("Erro inesperado ao vincular cliente.", show_alert=True)
            return

        await callback.answer(f"Cliente vinculado como {category.upper()}!")
        if occupancy.is_full:
            await callback.message.answer("Crédito completo! Todas as vagas foram preenchidas.")
        try:
            await send_credit(callback.message, occupancy)
        except CredentialCipherError as exc:
            await callback.message.answer(str(exc))

    @router.callback_query(F.data.startswith("credit_unlink:"))
    async def unlink_client(callback: CallbackQuery) -> None:
        if not await guard_seller_callback(callback):
            return
        ids = parse_ids(callback.data, 2)
        if ids is None:
            await callback.answer("Seleção inválida.", show_alert=True)
            return
        panel_id, client_id = ids
        seller_id = callback.from_user.id

        try:
            unlinked = await allocator.unlink_client(seller_id=seller_id, client_id=client_id)
            occupancy = await allocator.get_panel_occupancy(seller_id=seller_id, panel_id=panel_id)
        except (AllocationError, StorageError) as exc:
            await callback.answer(f"Erro ao desvincular: {exc}", show_alert=True)
            return
        except Exception:  # noqa: BLE001
            logger.exception("Unlinking client %s from panel %s failed", client_id, panel_id)
            await callback.answer("Erro inesperado ao desvincular cliente.", show_alert=True)
            return

        await callback.answer("Cliente desvinculado" if unlinked else "Cliente já estava livre")
        try:
            await send_credit(callback.message, occupancy)
        except CredentialCipherError as exc:
            await callback.message.answer(str(exc))

    @router.callback_query(F.data.startswith("credit_edit:"))
    async def ask_edit_credit(callback: CallbackQuery, state: FSMContext) -> None:
        if not await guard_seller_callback(callback):
            return
        ids = parse_ids(callback.data, 1)
        if ids is None:
            await callback.answer("Crédito inválido.", show_alert=True)
            return

        await state.set_state(SellerStates.edit_credit)
        await state.update_data(edit_panel_id=ids[0])
        await callback.message.answer(
            "Envie as novas vagas: `p2p:1,iptv:3`\n"
            "Para renomear: `novo nome|p2p:1,iptv:3`\n"
            "Para cancelar toque em `Voltar`.",
            reply_markup=back_keyboard(),
        )
        await callback.answer()

    @router.message(SellerStates.edit_credit)
    async def edit_credit(message: Message, state: FSMContext) -> None:
        if not await guard_seller(message):
            return
        if wants_back(message):
            await back_to_menu(message, state)
            return

        data = await state.get_data()
        panel_id = data.get("edit_panel_id")
        if not isinstance(panel_id, int):
            await back_to_menu(message, state)
            return

        raw = (message.text or "").strip()
        name = None
        if "|" in raw:
            name, raw = [p.strip() for p in raw.split("|", 1)]
        try:
            capacities = parse_capacities(raw)
        except ValueError as exc:
            await message.answer(str(exc))
            return

        try:
            occupancy = await allocator.update_panel(
                seller_id=message.from_user.id,
                panel_id=panel_id,
                name=name,
                capacities=capacities,
            )
        except ConflictError:
            await message.answer(f"Já existe um crédito chamado `{name}`.")
            return
        except (AllocationError, StorageError) as exc:
            await message.answer(f"Erro ao atualizar crédito: {exc}")
            return
        except Exception:  # noqa: BLE001
            logger.exception("Updating panel %s failed", panel_id)
            await message.answer("Erro inesperado ao atualizar crédito.")
            return

        await state.clear()
        await message.answer("Crédito atualizado!", reply_markup=seller_menu_keyboard())
        try:
            await send_credit(message, occupancy)
        except CredentialCipherError as exc:
            await message.answer(str(exc))

    @router.callback_query(F.data.startswith("credit_delete:"))
    async def ask_delete_credit(callback: CallbackQuery) -> None:
        if not await guard_seller_callback(callback):
            return
        ids = parse_ids(callback.data, 1)
        if ids is None:
            await callback.answer("Crédito inválido.", show_alert=True)
            return
        try:
            occupancy = await allocator.get_panel_occupancy(seller_id=callback.from_user.id, panel_id=ids[0])
        except AllocationError as exc:
            await callback.answer(str(exc), show_alert=True)
            return

        await callback.message.answer(
            f"Excluir o crédito `{occupancy.panel.name}`?\n"
            "Os clientes vinculados continuam cadastrados, apenas perdem o vínculo.",
            reply_markup=credit_delete_confirm_keyboard(occupancy.panel.id),
        )
        await callback.answer()

    @router.callback_query(F.data.startswith("credit_confirm_delete:"))
    async def confirm_delete_credit(callback: CallbackQuery) -> None:
        if not await guard_seller_callback(callback):
            return
        ids = parse_ids(callback.data, 1)
        if ids is None:
            await callback.answer("Crédito inválido.", show_alert=True)
            return
        try:
            await allocator.delete_panel(seller_id=callback.from_user.id, panel_id=ids[0])
        except AllocationError:
            await callback.answer("Crédito já excluído ou inexistente.", show_alert=True)
            return
        except StorageError as exc:
            await callback.answer(f"Erro ao excluir crédito: {exc}", show_alert=True)
            return
        except Exception:  # noqa: BLE001
            logger.exception("Deleting panel %s failed", ids[0])
            await callback.answer("Erro inesperado ao excluir crédito.", show_alert=True)
            return

        await callback.message.edit_text("Crédito excluído.")
        await callback.answer("Excluído")

    @router.callback_query(F.data == "credit_delete_cancel")
    async def cancel_delete_credit(callback: CallbackQuery) -> None:
        if not await guard_seller_callback(callback):
            return
        await callback.message.edit_text("Exclusão cancelada.")
        await callback.answer("Cancelado")

    return router
