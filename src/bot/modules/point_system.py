"""Модуль системы очков.

Команды:
- !points — показать свой баланс
- !points add <пользователь> <количество> — начислить очки (Administrator)
- !points take <пользователь> <количество> — списать очки (Administrator)

Пока модуль включён, работают цены команд (CommandRegistry.price_check).
"""

from typing_extensions import override

from src.bot.commands.event import CommandEvent
from src.bot.commands.registry import POINT_SYSTEM_MODULE
from src.bot.modules.base import BotModule, CommandSpec, SubCommandSpec
from src.core.exceptions import InsufficientPointsError
from src.core.permissions import PermissionGroup


class PointSystemModule(BotModule):
    """Баланс очков пользователей."""

    module_id = POINT_SYSTEM_MODULE
    commands = (
        CommandSpec(
            "points",
            subcommands=(
                SubCommandSpec("add", PermissionGroup.ADMIN),
                SubCommandSpec("take", PermissionGroup.ADMIN),
            ),
        ),
    )

    @override
    def on_command(self, event: CommandEvent) -> str | None:
        if event.command != "points":
            return None

        l10n = self.context.l10n
        points = self.context.points

        if not event.subcommand:
            return l10n.get(
                "points.balance",
                user=event.sender,
                points=points.get_points(event.sender),
            )

        usage_key = f"points.{event.subcommand}.usage"
        if len(event.args) < 3:
            return l10n.get(usage_key)

        username = event.args[1].lstrip("@").lower()
        try:
            amount = int(event.args[2])
        except ValueError:
            return l10n.get(usage_key)
        if amount <= 0:
            return l10n.get(usage_key)

        if event.subcommand == "add":
            balance = points.add_points(username, amount)
            return l10n.get(
                "points.add.success", user=username, points=amount, balance=balance
            )

        try:
            balance = points.take_points(username, amount)
        except InsufficientPointsError as e:
            return l10n.get(
                "points.take.not_enough", user=username, points=e.available
            )
        return l10n.get(
            "points.take.success", user=username, points=amount, balance=balance
        )
