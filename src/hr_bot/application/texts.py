"""Textos do bot (HTML do Telegram).

Conteúdo de apresentação: pode mudar sem afetar dedupe nem roteamento.
Nomes e textos vindos do usuário são sempre escapados.
"""

from __future__ import annotations

from datetime import date, datetime
from html import escape

from hr_bot.adapters.telegram.keyboards import STATUS_ICONS, VACATION_ICON
from hr_bot.domain.enums import StatusType, VacationStatus
from hr_bot.domain.models import Employee, Sender, VacationBalance, VacationRequest
from hr_bot.utils.dates import format_date, format_datetime, format_time

BUTTON_DETAILS = "Відмічено через кнопку"

WELCOME = (
    "👋 <b>Привіт зірко, я помічник твого HR!</b>\n\n"
    "Я створений, щоб автоматизувати деякі процеси.\n\n"
    "<b>Ознайомся з функціями які я виконую:</b>"
)

HELP = (
    "🤖 <b>Не розумію команду</b>\n\n"
    "<b>Можете написати:</b>\n"
    "• \"спізнюю на 15 хвилин\"\n"
    "• \"працюю ремоут\"\n"
    "• \"лікарняний\"\n\n"
    "<b>Або скористатися кнопками:</b>"
)

UNKNOWN_COMMAND = "❌ Невідома команда"
INVALID_DATE = "❌ Помилка обробки дати. Спробуйте ще раз."
SAVE_FAILED = "❌ Помилка збереження. Спробуйте ще раз."

HR_PREFIX = "📢 HR ПОВІДОМЛЕННЯ:"


def status_menu(status: StatusType) -> str:
    return f"{STATUS_ICONS[status]} <b>{status.label}</b>\n\nОберіть дату:"


def calendar_prompt(status: StatusType) -> str:
    return (
        f"📅 <b>Оберіть дату для {status.label}</b>\n\n"
        "Натисніть на потрібну дату:"
    )


def status_confirmation(status: StatusType, status_date: date, recorded_at: datetime) -> str:
    """Confirmação para o colaborador (recorded_at já no fuso local)."""
    return (
        f"✅ {status.label} зафіксовано!\n\n"
        f"📅 Дата: {format_date(status_date)}\n"
        f"⏰ Час фіксації: {format_time(recorded_at)}"
    )


def hr_notification(
    sender: Sender,
    status: StatusType,
    status_date: date,
    details: str,
    recorded_at: datetime,
) -> str:
    """Aviso para o chat do RH (recorded_at já no fuso local)."""
    return (
        f"{HR_PREFIX}\n\n"
        f"📍 {status.label}: {escape(sender.display_name)}\n"
        f"📅 Дата: {format_date(status_date)}\n"
        f"💬 \"{escape(details)}\"\n"
        f"⏰ Час фіксації: {format_datetime(recorded_at)}"
    )


# Registro no diretório de colaboradores

REGISTRATION_STEP_DEPARTMENT = "📝 <b>Реєстрація</b>\n\n<b>Крок 1 з 3:</b> Оберіть відділ:"
REGISTRATION_FAILED = "❌ Помилка реєстрації. Спробуйте пізніше або зверніться до HR."
INVALID_CHOICE = "❌ Невірний вибір. Почніть реєстрацію спочатку."


def registration_welcome(first_name: str) -> str:
    return (
        "🌟 <b>Ласкаво просимо до HR Бота!</b>\n\n"
        f"👋 <b>Привіт, {escape(first_name or 'колега')}!</b>\n\n"
        "Я допоможу вам:\n"
        "🏖️ Подавати заявки на відпустку\n"
        "🏠 Повідомляти про Remote роботу\n"
        "⏰ Повідомляти про спізнення\n"
        "🤒 Повідомляти про лікарняний\n\n"
        "<b>Для початку роботи потрібна реєстрація.</b>"
    )


def registration_step_team(department: str) -> str:
    return f"✅ <b>Відділ:</b> {escape(department)}\n\n<b>Крок 2 з 3:</b> Оберіть команду:"


def registration_step_position(team: str) -> str:
    return f"✅ <b>Команда:</b> {escape(team)}\n\n<b>Крок 3 з 3:</b> Оберіть посаду:"


def registration_complete(employee: Employee) -> str:
    return (
        "✅ <b>Реєстрацію завершено!</b>\n\n"
        f"👤 <b>Ім'я:</b> {escape(employee.full_name)}\n"
        f"🏢 <b>Відділ:</b> {escape(employee.department)}\n"
        f"👥 <b>Команда:</b> {escape(employee.team)}\n"
        f"💼 <b>Посада:</b> {escape(employee.position)}\n\n"
        "Тепер ви можете користуватися всіма функціями бота!"
    )


# Férias

VACATION_PAST_DATE = "❌ Відпустку можна подати лише на майбутні дати."
VACATION_ACCESS_DENIED = "❌ Доступ обмежено. Тільки для HR та CEO."
VACATION_DAYS_OUT_OF_RANGE = "❌ Невірна кількість днів відпустки."


def vacation_menu(balance: VacationBalance, max_days: int) -> str:
    return (
        f"{VACATION_ICON} <b>Відпустки</b>\n\n"
        f"💰 <b>Ваш баланс:</b> {balance.used}/{balance.total} днів\n"
        f"📅 <b>Доступно:</b> {balance.available} днів\n\n"
        "<b>Правила відпусток:</b>\n"
        f"• Мін: 1 день, Макс: {max_days} днів за раз\n"
        "• Накладки заборонені в команді\n"
        "• Заявку затверджує HR\n\n"
        "📅 <b>Оберіть дату початку:</b>"
    )


def vacation_pick_days(start: date) -> str:
    return f"📅 <b>Початок:</b> {format_date(start)}\n\nОберіть кількість днів:"


def vacation_insufficient(balance: VacationBalance, days: int) -> str:
    return (
        f"❌ Недостатньо днів відпустки: запитано {days}, "
        f"доступно {balance.available}."
    )


def vacation_conflict(conflicts: list[VacationRequest]) -> str:
    lines = [
        f"• {escape(item.full_name)}: {format_date(item.start_date)} - "
        f"{format_date(item.end_date)}"
        for item in conflicts
    ]
    return "❌ <b>Накладка з відпусткою в команді:</b>\n\n" + "\n".join(lines)


def vacation_submitted(request: VacationRequest) -> str:
    return (
        "✅ <b>Заявку на відпустку подано!</b>\n\n"
        f"📅 {format_date(request.start_date)} - {format_date(request.end_date)} "
        f"({request.days} днів)\n"
        f"⏳ <b>Статус:</b> {request.status.label}\n"
        f"🆔 {request.request_id}"
    )


def vacation_hr_request(request: VacationRequest, balance: VacationBalance) -> str:
    return (
        f"{HR_PREFIX}\n\n"
        f"{VACATION_ICON} <b>Заявка на відпустку</b>\n"
        f"👤 {escape(request.full_name)}\n"
        f"🏢 {escape(request.department)}/{escape(request.team)}\n"
        f"📅 {format_date(request.start_date)} - {format_date(request.end_date)} "
        f"({request.days} днів)\n"
        f"💰 Баланс до: {balance.available}, після: {balance.available - request.days}\n"
        f"🆔 {request.request_id}"
    )


def vacation_not_found(request_id: str) -> str:
    return f"❌ Заявка з ID {escape(request_id)} не знайдена."


def vacation_already_decided(request: VacationRequest) -> str:
    return (
        f"ℹ️ Заявку {request.request_id} вже оброблено: {request.status.label} "
        f"({escape(request.decided_by)})."
    )


def vacation_decision_for_employee(request: VacationRequest) -> str:
    icon = "✅" if request.status is VacationStatus.APPROVED else "❌"
    return (
        f"{icon} <b>Вашу заявку на відпустку {request.status.label.lower()}</b>\n\n"
        f"📅 {format_date(request.start_date)} - {format_date(request.end_date)} "
        f"({request.days} днів)"
    )


def vacation_decision_for_hr(request: VacationRequest) -> str:
    icon = "✅" if request.status is VacationStatus.APPROVED else "❌"
    return (
        f"{icon} Заявку {request.request_id} ({escape(request.full_name)}): "
        f"{request.status.label}."
    )
