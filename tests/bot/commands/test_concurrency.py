"""Тесты потокобезопасности реестра команд.

Команды регистрируются и проверяются из пула потоков (чат-адаптер
и API панели вызывают реестр через asyncio.to_thread), поэтому
реестр не должен терять записи и путать скрипты при гонках.
"""

from concurrent.futures import ThreadPoolExecutor

from src.bot.commands.registry import CommandRegistry
from src.db.datastore import Datastore
from src.db.tables import Table

WORKERS = 16


class TestRegistryConcurrency:
    """Параллельные операции с реестром."""

    def test_parallel_registration_keeps_every_command(
        self, registry: CommandRegistry
    ) -> None:
        """Параллельная регистрация разных команд не теряет ни одной."""
        names = [f"cmd{i}" for i in range(1000)]

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            list(pool.map(lambda name: registry.register_command("S", name), names))

        assert sorted(registry.list_commands()) == sorted(names)

    def test_parallel_registration_of_same_name_first_wins(
        self, registry: CommandRegistry
    ) -> None:
        """Из гонки за одно имя побеждает ровно один скрипт."""
        scripts = [f"script{i}" for i in range(200)]

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            list(pool.map(lambda script: registry.register_command(script, "x"), scripts))

        assert registry.list_commands() == ["x"]
        assert registry.get_command_script("x") in scripts

    def test_register_and_temp_unregister_race(
        self, registry: CommandRegistry, store: Datastore
    ) -> None:
        """После гонки регистрации и временного удаления состояние согласовано.

        Команда либо есть в реестре, либо её скрипт запомнен в хранилище.
        """
        names = [f"cmd{i}" for i in range(300)]

        def churn(name: str) -> None:
            registry.register_command("S", name)
            registry.temp_unregister_command(name)
            registry.register_command("S", name)

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            list(pool.map(churn, names))

        for name in names:
            assert registry.command_exists(name)
            assert not store.exists(Table.TEMP_DISABLED_COMMAND_SCRIPTS, name)

    def test_readers_during_writes(self, registry: CommandRegistry) -> None:
        """Чтение во время записи не падает и видит согласованные снимки."""
        registry.register_command("S", "points")

        def write(i: int) -> None:
            registry.register_subcommand("points", f"sub{i}")
            registry.register_alias(f"alias{i}")

        def read(_: int) -> int:
            registry.snapshot()
            registry.list_aliases()
            return len(registry.list_subcommands("points"))

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            writes = [pool.submit(write, i) for i in range(500)]
            reads = [pool.submit(read, i) for i in range(500)]
            for future in writes + reads:
                future.result()

        assert len(registry.list_subcommands("points")) == 500
        assert len(registry.list_aliases()) == 500
