"""
Unit tests for the interactive menu.

The session is driven by scripted answers instead of a terminal.
"""

from contextlib import contextmanager

import pytest
from rich.console import Console

from empress.cli.interactive import EXIT_CHOICE, InteractiveSession


class ScriptedPrompt:
    """Returns queued answers; Confirm-style calls fall back to their default."""

    def __init__(self, answers, confirmations=()):
        self.answers = list(answers)
        self.confirmations = list(confirmations)
        self.questions = []

    def ask(self, question, **kwargs):
        self.questions.append(question)
        return self.answers.pop(0)

    def confirm(self, question, default=False):
        self.questions.append(question)
        if not self.confirmations:
            return default
        return self.confirmations.pop(0)


@pytest.fixture
def console():
    return Console(record=True, width=120)


def _session(gateway, prompt, console):
    opened = []

    @contextmanager
    def open_gateway():
        opened.append(gateway)
        try:
            yield gateway
        finally:
            gateway.disconnect()

    session = InteractiveSession(open_gateway, console=console, ask=prompt.ask, confirm=prompt.confirm)
    return session, opened


class TestMenuLoop:
    """Tests for the menu state machine."""

    def test_exit_immediately(self, fake_gateway, console):
        prompt = ScriptedPrompt([EXIT_CHOICE])
        session, opened = _session(fake_gateway, prompt, console)

        session.run()

        assert "Goodbye" in console.export_text()
        assert opened == []

    def test_returns_to_menu_after_action(self, fake_gateway, sample_statement, console):
        fake_gateway.insert_one(sample_statement)
        prompt = ScriptedPrompt(["4", "4", EXIT_CHOICE])
        session, opened = _session(fake_gateway, prompt, console)

        session.run()

        assert len(opened) == 2
        assert prompt.questions.count("What would you like to do?") == 3
        assert fake_gateway.disconnected is True

    def test_template_needs_no_database(self, fake_gateway, console):
        prompt = ScriptedPrompt(["2", EXIT_CHOICE])
        session, opened = _session(fake_gateway, prompt, console)

        session.run()

        assert "INSERT_ACTOR_NAME" in console.export_text()
        assert opened == []


class TestStatementPrompts:
    """Tests for the statement prompt sequence."""

    ANSWERS = ["John", "mailto:john@x.com", "http://adlnet.gov/expapi/verbs/completed", "Course"]

    def test_collect_statement(self, fake_gateway, console):
        prompt = ScriptedPrompt(self.ANSWERS)
        session, _ = _session(fake_gateway, prompt, console)

        statement = session.collect_statement()

        assert statement["actor"] == {"name": "John", "mbox": "mailto:john@x.com"}
        assert statement["verb"]["display"] == {"en-US": "completed"}
        assert statement["object"] == {"objectType": "Activity", "name": "Course"}

    def test_generated_statement_not_stored_by_default(self, fake_gateway, console):
        prompt = ScriptedPrompt(["1", *self.ANSWERS, EXIT_CHOICE])
        session, opened = _session(fake_gateway, prompt, console)

        session.run()

        assert "Generated statement" in console.export_text()
        assert opened == []
        assert fake_gateway.count_all() == 0

    def test_generated_statement_stored_on_confirm(self, fake_gateway, console):
        prompt = ScriptedPrompt(["1", *self.ANSWERS, EXIT_CHOICE], confirmations=[True])
        session, _ = _session(fake_gateway, prompt, console)

        session.run()

        assert fake_gateway.operations()[-1] == "insert_one"
        assert "Record created successfully" in console.export_text()

    def test_blank_answers_are_still_stored(self, fake_gateway, console):
        prompt = ScriptedPrompt(["1", "John", "", "", "", EXIT_CHOICE], confirmations=[True])
        session, _ = _session(fake_gateway, prompt, console)

        session.run()

        # empty strings are still strings: the shape is valid
        assert fake_gateway.operations() == ["insert_one"]


class TestResetConfirmation:
    """The reset action defaults to 'no'."""

    def test_default_answer_cancels(self, fake_gateway, sample_statement, console):
        fake_gateway.insert_one(sample_statement)
        prompt = ScriptedPrompt(["11", EXIT_CHOICE])
        session, _ = _session(fake_gateway, prompt, console)

        session.run()

        assert fake_gateway.count_all() == 1
        assert "Database reset cancelled." in console.export_text()

    def test_explicit_yes_deletes(self, fake_gateway, sample_statement, console):
        fake_gateway.insert_one(sample_statement)
        prompt = ScriptedPrompt(["11", EXIT_CHOICE], confirmations=[True])
        session, _ = _session(fake_gateway, prompt, console)

        session.run()

        assert fake_gateway.count_all() == 0
        assert "Deleted 1 records." in console.export_text()


class TestPromptedLookups:
    """Menu entries that ask for arguments before querying."""

    def test_duration_prompts(self, fake_gateway, console):
        prompt = ScriptedPrompt(["10", "10", "60", EXIT_CHOICE])
        session, _ = _session(fake_gateway, prompt, console)

        session.run()

        assert fake_gateway.calls[-1] == ("find", ({"duration": {"$gte": 10, "$lte": 60}}, None))

    def test_failure_is_rendered_and_loop_continues(self, fake_gateway, console):
        prompt = ScriptedPrompt(["6", "bad-id", "registrar", EXIT_CHOICE])
        session, _ = _session(fake_gateway, prompt, console)

        session.run()

        text = console.export_text()
        assert "Invalid statement id" in text
        assert "Goodbye" in text
