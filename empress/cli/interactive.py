"""
Interactive menu for empress-cli.

Launched when ``empress`` runs without a command. The loop is
menu -> prompts (or a confirmation) -> result -> menu, and ends only when
the user picks Exit. Every action that touches the database opens its own
gateway scope, so nothing stays connected while the menu waits for input.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from empress.cli.render import render_result, to_json
from empress.core.results import CommandResult
from empress.db.gateway import StatementGateway
from empress.handlers import maintenance, reports, statements
from empress.handlers.profiles import build_statement, generate_template

GatewayFactory = Callable[[], AbstractContextManager[StatementGateway]]

EXIT_CHOICE = "0"

MENU_ITEMS = [
    ("1", "Interactively generate an xAPI statement"),
    ("2", "Generate an xAPI statement template"),
    ("3", "Search for statements by content"),
    ("4", "List all object types in the LRS"),
    ("5", "Visualize the progress of an actor"),
    ("6", "Set the authority for an xAPI statement"),
    ("7", "Get the most active actors"),
    ("8", "Visualize verb usage"),
    ("9", "List all extensions"),
    ("10", "Get statements by duration"),
    ("11", "Reset the database"),
    (EXIT_CHOICE, "Exit"),
]

STATEMENT_QUESTIONS = [
    ("actor_name", "What is the actor name?"),
    ("actor_mbox", "What is the actor mbox?"),
    ("verb_id", "What is the verb id (e.g., http://adlnet.gov/expapi/verbs/completed)?"),
    ("object_name", "What is the object name?"),
]


class InteractiveSession:
    """
    Menu-driven session.

    ``ask`` and ``confirm`` default to rich's Prompt.ask / Confirm.ask and
    are injectable so the loop can be driven without a terminal.
    """

    def __init__(
        self,
        open_gateway: GatewayFactory,
        console: Console | None = None,
        ask: Callable[..., str] = Prompt.ask,
        confirm: Callable[..., bool] = Confirm.ask,
    ) -> None:
        self.open_gateway = open_gateway
        self.console = console or Console()
        self.ask = ask
        self.confirm = confirm
        self._actions: dict[str, Callable[[], CommandResult | None]] = {
            "1": self._generate_statement,
            "2": self._show_template,
            "3": self._search,
            "4": lambda: self._with_gateway(reports.list_object_types),
            "5": self._actor_progress,
            "6": self._set_authority,
            "7": lambda: self._with_gateway(reports.most_active_actors),
            "8": lambda: self._with_gateway(reports.visualize_verb_usage),
            "9": lambda: self._with_gateway(reports.list_all_extensions),
            "10": self._by_duration,
            "11": self._reset,
        }

    # ========================================
    # Loop
    # ========================================

    def run(self) -> None:
        """Show the menu until the user exits."""
        while True:
            choice = self.show_menu()
            if choice == EXIT_CHOICE:
                self.console.print("Exiting the program. Goodbye!")
                return

            result = self._actions[choice]()
            if result is not None:
                render_result(self.console, result)

    def show_menu(self) -> str:
        lines = "\n".join(f"  [cyan]{key:>2}[/cyan]  {label}" for key, label in MENU_ITEMS)
        self.console.print(Panel(lines, title="[bold]empress[/bold]", expand=False))
        return self.ask(
            "What would you like to do?",
            choices=[key for key, _ in MENU_ITEMS],
            show_choices=False,
        )

    def _with_gateway(self, handler: Callable[..., CommandResult], *args: Any) -> CommandResult:
        with self.open_gateway() as gateway:
            return handler(gateway, *args)

    # ========================================
    # Prompt sequences
    # ========================================

    def collect_statement(self) -> dict[str, Any]:
        """Ask the statement questions in order and assemble the answers."""
        answers = {name: self.ask(question) for name, question in STATEMENT_QUESTIONS}
        return build_statement(**answers)

    def _generate_statement(self) -> CommandResult | None:
        statement = self.collect_statement()
        self.console.print("Generated statement:")
        self.console.print_json(to_json(statement))

        if not self.confirm("Store this statement?", default=False):
            return None
        return self._with_gateway(statements.create, json.dumps(statement))

    def _show_template(self) -> None:
        self.console.print("Generated template:")
        self.console.print_json(to_json(generate_template()))

    def _search(self) -> CommandResult:
        text = self.ask("Search text")
        return self._with_gateway(statements.search_statements, text)

    def _actor_progress(self) -> CommandResult:
        actor = self.ask("Actor mbox (e.g., mailto:john@example.com)")
        return self._with_gateway(statements.visualize_actor_progress, actor)

    def _set_authority(self) -> CommandResult:
        statement_id = self.ask("Statement id")
        authority = self.ask("Authority (text or JSON)")
        return self._with_gateway(statements.set_statement_authority, statement_id, authority)

    def _by_duration(self) -> CommandResult:
        minimum = self.ask("Minimum duration")
        maximum = self.ask("Maximum duration")
        return self._with_gateway(statements.statements_by_duration, minimum, maximum)

    def _reset(self) -> CommandResult:
        return self._with_gateway(
            maintenance.reset_db,
            lambda message: self.confirm(message, default=False),
        )
