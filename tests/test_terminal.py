import io

import pytest

from taskscope.process_table import not_in_path_message
from taskscope.terminal import (
    CommandHistory,
    LaunchUsageError,
    Terminal,
    parse_launch,
)

LAUNCH_USAGE = "launch application [OPTION]... with launcher [OPTION]..."


def make_terminal(text="", environ=None, launcher=None, history_file=None):
    out, err = io.StringIO(), io.StringIO()
    term = Terminal(
        stdin=io.StringIO(text),
        stdout=out,
        stderr=err,
        environ={} if environ is None else environ,
        launcher=launcher,
        history_file=history_file,
    )
    term.init(["prog"])
    return term, out, err


def test_parse_launch_splits_app_and_launcher():
    app, launcher = parse_launch(["launch", "app", "-n", "with", "mpirun", "-np", "2"])
    assert app == ["app", "-n"]
    assert launcher == ["mpirun", "-np", "2"]


def test_parse_launch_too_short():
    with pytest.raises(LaunchUsageError):
        parse_launch(["launch", "a", "with"])


def test_parse_launch_without_with():
    with pytest.raises(LaunchUsageError, match="Malformed launch command"):
        parse_launch(["launch", "a", "b", "c"])


def test_parse_launch_empty_app():
    with pytest.raises(LaunchUsageError, match="Malformed launch command"):
        parse_launch(["launch", "with", "x", "y"])


def test_parse_launch_missing_launcher():
    with pytest.raises(LaunchUsageError, match="'with' what"):
        parse_launch(["launch", "a", "b", "with"])


def test_history_numbers_and_recall():
    history = CommandHistory()
    first = history.add("help")
    second = history.add("env")
    assert (first, second) == (1, 2)
    assert history.recall(first) == "help"
    assert history.recall(second) == "env"


def test_history_skips_consecutive_duplicates():
    history = CommandHistory()
    history.add("env")
    history.add("env")
    assert len(history) == 1


def test_history_missing_event():
    history = CommandHistory()
    history.add("env")
    with pytest.raises(KeyError):
        history.recall(7)


def test_history_drops_oldest():
    history = CommandHistory(max_size=2)
    for line in ["a", "b", "c"]:
        history.add(line)
    assert [line for _, line in history] == ["b", "c"]
    with pytest.raises(KeyError):
        history.recall(1)


def test_history_save_load_round_trip(tmp_path):
    history = CommandHistory()
    lines = ["setenv A b", "launch x\\y with\tz", "caf\u00e9 ok"]
    for line in lines:
        history.add(line)
    path = tmp_path / "history"
    history.save(path)
    loaded = CommandHistory()
    loaded.load(path)
    assert [line for _, line in loaded] == lines
    assert path.read_text().splitlines()[0] == CommandHistory.MAGIC


def test_history_load_rejects_other_files(tmp_path):
    path = tmp_path / "history"
    path.write_text("just text\n")
    with pytest.raises(ValueError):
        CommandHistory().load(path)


def test_setenv_and_unsetenv():
    env = {}
    term, _, _ = make_terminal(environ=env)
    assert term.evaluate_input(["setenv", "FOO", "bar"]) is True
    assert env == {"FOO": "bar"}
    term.evaluate_input(["unsetenv", "FOO"])
    assert env == {}


def test_setenv_wrong_arity_prints_usage():
    env = {}
    term, _, err = make_terminal(environ=env)
    term.evaluate_input(["setenv", "FOO"])
    assert "Usage: setenv ENV_VAR VAL" in err.getvalue()
    assert env == {}


def test_unknown_command():
    term, _, err = make_terminal()
    assert term.evaluate_input(["bogus"]) is True
    assert "'bogus' is not a valid command. Try 'help'." in err.getvalue()


def test_empty_command_line_raises():
    term, _, _ = make_terminal()
    with pytest.raises(ValueError):
        term.evaluate_input([])


def test_help_lists_commands():
    term, out, _ = make_terminal()
    term.evaluate_input(["?"])
    text = out.getvalue()
    assert "o Available Commands" in text
    assert f"- launch : {LAUNCH_USAGE}" in text
    assert "- quit : quit" in text


def test_command_pairs_cover_registry():
    term, _, _ = make_terminal()
    pairs = term.command_pairs()
    names = {name for name, _ in pairs}
    assert names == {
        "quit", "help", "launch", "modes", "history",
        "setenv", "unsetenv", "clear", "env",
    }
    assert pairs == sorted(pairs)


def test_env_prints_variables():
    term, out, _ = make_terminal(environ={"B": "2", "A": "1"})
    term.evaluate_input(["env"])
    assert out.getvalue() == "A=1\nB=2\n"


def test_launch_calls_launcher():
    calls = []

    def launcher(app, launch):
        calls.append((app, launch))
        return 0

    term, _, _ = make_terminal(launcher=launcher)
    assert term.evaluate_input(["l", "app", "x", "with", "mpirun", "-n", "2"]) is True
    assert calls == [(["app", "x"], ["mpirun", "-n", "2"])]


def test_launch_malformed_reports_usage():
    calls = []
    term, _, err = make_terminal(launcher=lambda a, b: calls.append((a, b)) or 0)
    term.evaluate_input(["launch", "a", "b", "c"])
    text = err.getvalue()
    assert "Malformed launch command... Please try again." in text
    assert f"Usage: {LAUNCH_USAGE}" in text
    assert calls == []


def test_launch_missing_program():
    term, _, err = make_terminal()
    missing = "taskscope-no-such-launcher-program"
    term.evaluate_input(["launch", "app", "with", missing])
    assert not_in_path_message(missing) in err.getvalue()


def test_quit_accepts_only_capital_y():
    term, _, _ = make_terminal("Y\n")
    assert term.quit() is True
    term, _, _ = make_terminal("y\n")
    assert term.quit() is False


def test_interact_stops_after_confirmed_quit():
    env = {}
    term, _, _ = make_terminal("setenv A b\nquit\nY\nsetenv C d\n", environ=env)
    term.interact()
    assert env == {"A": "b"}


def test_interact_continues_after_declined_quit():
    env = {}
    term, _, _ = make_terminal("quit\nn\nsetenv C d\n", environ=env)
    term.interact()
    assert env == {"C": "d"}


def test_interact_joins_unfinished_quotes():
    env = {}
    term, _, _ = make_terminal('setenv A "b\n c"\n', environ=env)
    term.interact()
    assert env == {"A": "b\n c"}


def test_history_command_output():
    term, out, _ = make_terminal("setenv A b\nhistory\n")
    term.interact()
    assert "   1 setenv A b\n" in out.getvalue()


def test_history_recall_reruns_command():
    env = {}
    term, _, _ = make_terminal("setenv A b\nunsetenv A\n!1\n", environ=env)
    term.interact()
    assert env == {"A": "b"}
    assert [line for _, line in term.history][-1] == "setenv A b"


def test_history_recall_of_unknown_event():
    term, _, err = make_terminal("!9\n")
    term.interact()
    assert "!9: event not found" in err.getvalue()
    assert len(term.history) == 0


def test_history_saved_and_reloaded(tmp_path):
    path = tmp_path / "history"
    term, _, _ = make_terminal("setenv A b\nenv\n", history_file=path)
    term.interact()
    saved = CommandHistory()
    saved.load(path)
    assert [line for _, line in saved] == ["setenv A b", "env"]

    env = {}
    again, _, _ = make_terminal("!1\n", environ=env, history_file=path)
    again.interact()
    assert env == {"A": "b"}


def test_init_warns_on_bad_history_file(tmp_path):
    path = tmp_path / "history"
    path.write_text("garbage\n")
    _, _, err = make_terminal(history_file=path)
    assert f"Command history couldn't be loaded from: {path}" in err.getvalue()