import unittest

from fnr.models import Decision, Edit, FileChangeSet, Fingerprint
from fnr.pattern import compile_pattern, compile_template, find_matches, render
from fnr.review import HELP_TEXT, PROMPT, ReviewSession, SessionState


class FakeUI:
    def __init__(self, commands=(), replacements=()):
        self.commands = list(commands)
        self.replacements = list(replacements)
        self.messages = []
        self.lines = []
        self.prompts = []

    def display_message(self, content, **kwargs):
        self.messages.append(content)

    def display_lines(self, lines):
        self.lines.extend(line.plain for line in lines)

    def read_command(self, prompt):
        self.prompts.append(prompt)
        return self.commands.pop(0) if self.commands else None

    def read_replacement(self, default):
        return self.replacements.pop(0) if self.replacements else None


def make_change_set(text, find="foo", replace="bar", path="demo.txt"):
    pattern = compile_pattern(find)
    template = compile_template(replace, pattern)
    change_set = FileChangeSet(path=path, original=text, fingerprint=Fingerprint(0, 0, ""))
    for match in find_matches(pattern, text, path):
        change_set.edits.append(Edit(match=match, replacement=render(template, match, text)))
    return change_set


def decisions(change_set):
    return [edit.decision for edit in change_set.edits]


A = Decision.ACCEPTED
R = Decision.REJECTED


class ReviewSessionTests(unittest.TestCase):
    def test_yes_and_no_decide_one_match_each(self):
        ui = FakeUI(["y", "n", "y"])
        change_set = make_change_set("foo\nfoo\nfoo\n")

        ReviewSession(ui).review(change_set)

        self.assertEqual(decisions(change_set), [A, R, A])
        self.assertEqual(ui.prompts, [PROMPT] * 3)

    def test_commands_are_case_insensitive_and_trimmed(self):
        ui = FakeUI([" Y ", "N"])
        change_set = make_change_set("foo foo")

        ReviewSession(ui).review(change_set)

        self.assertEqual(decisions(change_set), [A, R])

    def test_prompt_shows_header_and_hunk(self):
        ui = FakeUI(["y"])
        change_set = make_change_set("x\nfoo = 1\n")

        ReviewSession(ui).review(change_set)

        self.assertEqual(ui.lines, ["demo.txt: 1 matching lines", "-2: foo = 1", "+2: bar = 1"])

    def test_accept_rest_of_file_stops_prompting_in_that_file_only(self):
        ui = FakeUI(["n", "a", "n"])
        first = make_change_set("foo\nfoo\nfoo\nfoo\n", path="one.txt")
        second = make_change_set("foo\n", path="two.txt")
        session = ReviewSession(ui)

        session.review(first)
        self.assertEqual(decisions(first), [R, A, A, A])
        self.assertEqual(len(ui.prompts), 2)
        self.assertEqual(decisions(second), [Decision.PENDING])

        session.review(second)
        self.assertEqual(decisions(second), [R])
        self.assertEqual(len(ui.prompts), 3)

    def test_skip_rest_of_file_moves_on_to_next_file(self):
        ui = FakeUI(["y", "d", "y"])
        first = make_change_set("foo foo foo", path="one.txt")
        second = make_change_set("foo", path="two.txt")
        session = ReviewSession(ui)

        session.review(first)
        session.review(second)

        self.assertEqual(decisions(first), [A, R, R])
        self.assertEqual(decisions(second), [A])
        self.assertEqual(len(ui.prompts), 3)

    def test_quit_rejects_everything_left_and_never_prompts_again(self):
        ui = FakeUI(["y", "q", "y", "y"])
        first = make_change_set("foo foo foo", path="one.txt")
        second = make_change_set("foo", path="two.txt")
        session = ReviewSession(ui)

        session.review(first)
        session.review(second)

        self.assertTrue(session.terminated)
        self.assertEqual(session.state, SessionState.QUIT)
        self.assertEqual(decisions(first), [A, R, R])
        self.assertEqual(decisions(second), [R])
        self.assertEqual(len(ui.prompts), 2)

    def test_end_of_input_behaves_like_quit(self):
        ui = FakeUI(["y"])
        first = make_change_set("foo foo", path="one.txt")
        second = make_change_set("foo", path="two.txt")
        session = ReviewSession(ui)

        session.review(first)
        session.review(second)

        self.assertTrue(session.terminated)
        self.assertEqual(decisions(first), [A, R])
        self.assertEqual(decisions(second), [R])

    def test_help_reprompts_same_match(self):
        ui = FakeUI(["?", "y"])
        change_set = make_change_set("foo")

        session = ReviewSession(ui)
        session.review(change_set)

        self.assertIn(HELP_TEXT, ui.messages)
        self.assertEqual(len(ui.prompts), 2)
        self.assertEqual(decisions(change_set), [A])
        self.assertEqual(session.state, SessionState.PROMPTING)

    def test_invalid_command_reprompts_with_notice(self):
        ui = FakeUI(["x", "", "n"])
        change_set = make_change_set("foo")

        ReviewSession(ui).review(change_set)

        self.assertEqual(len(ui.prompts), 3)
        self.assertTrue(any("Unknown command 'x'" in str(message) for message in ui.messages))
        self.assertEqual(decisions(change_set), [R])

    def test_edit_uses_custom_replacement(self):
        ui = FakeUI(["e", "y"], replacements=["custom"])
        change_set = make_change_set("foo foo")

        ReviewSession(ui).review(change_set)

        self.assertEqual(decisions(change_set), [A, A])
        self.assertEqual(change_set.edits[0].replacement, "custom")
        self.assertEqual(change_set.edits[1].replacement, "bar")
        self.assertIn("+1: custom foo", ui.lines)

    def test_edit_cancelled_skips_match(self):
        ui = FakeUI(["e", "y"])
        change_set = make_change_set("foo foo")

        ReviewSession(ui).review(change_set)

        self.assertEqual(decisions(change_set), [R, A])
        self.assertIn("... skipped ...", ui.messages)

    def test_sessions_do_not_share_state(self):
        quitting = ReviewSession(FakeUI(["q"]))
        quitting.review(make_change_set("foo"))

        fresh_ui = FakeUI(["y"])
        change_set = make_change_set("foo")
        ReviewSession(fresh_ui).review(change_set)

        self.assertTrue(quitting.terminated)
        self.assertEqual(decisions(change_set), [A])


if __name__ == "__main__":
    unittest.main()
