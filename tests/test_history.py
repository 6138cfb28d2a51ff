import pytest

from reasons.history import CommandHistory, HistoryEntry, should_save_command


@pytest.mark.parametrize(
    "command, expected",
    [
        ("", False),
        (None, False),
        ("x = 1", True),
        (".help", True),
        (".history 5", True),
        (".version", True),
        (".exit", False),
        (".load file", False),
        ("!ls", False),
    ],
)
def test_should_save_command(command, expected):
    assert should_save_command(command) is expected


def test_add_skips_recent_duplicates():
    hist = CommandHistory()
    assert hist.add("a")
    assert not hist.add("a")
    assert hist.commands() == ["a"]


def test_duplicate_outside_window_is_kept():
    hist = CommandHistory()
    for cmd in ["a", "b", "c", "d", "e", "f"]:
        hist.add(cmd)
    assert hist.add("a")
    assert hist.commands()[-1] == "a"


def test_add_rejects_unsaved_commands_and_when_disabled():
    hist = CommandHistory()
    hist.add("!rm")
    hist.add(".exit")
    hist.enabled = False
    hist.add("x")
    assert len(hist) == 0


def test_trim_to_max_size():
    hist = CommandHistory(max_size=3)
    for cmd in ["a", "b", "c", "d"]:
        hist.add(cmd)
    assert hist.commands() == ["b", "c", "d"]


def test_navigation():
    hist = CommandHistory()
    assert hist.previous() is None
    assert hist.next() is None
    hist.add("one")
    hist.add("two")
    assert hist.previous() == "two"
    assert hist.previous() == "one"
    assert hist.previous() == "one"
    assert hist.next() == "two"
    assert hist.next() == ""
    assert hist.current_index == len(hist)


def test_reset_navigation():
    hist = CommandHistory()
    hist.add("one")
    hist.previous()
    hist.reset_navigation()
    assert hist.current_index == len(hist)


def test_save_load_round_trip(tmp_path):
    path = tmp_path / "hist"
    hist = CommandHistory()
    hist.add("alpha")
    hist.add("beta | gamma")
    hist.save(path)
    text = path.read_text()
    assert text.startswith("# Reasons REPL Command History\n")
    for entry in hist.entries:
        assert f"{entry.timestamp}|{entry.session_id}|{entry.command}" in text

    other = CommandHistory()
    assert other.load(path)
    assert sorted(other.commands()) == sorted(hist.commands())
    assert other.session_id == hist.session_id + 1


def test_load_missing_file(tmp_path):
    hist = CommandHistory()
    assert hist.load(tmp_path / "missing") is False
    assert len(hist) == 0


def test_load_sorts_newest_first_and_skips_bad_lines(tmp_path):
    path = tmp_path / "hist"
    path.write_text("# comment\n100|3|older\nbad line\n200|1|newer\n")
    hist = CommandHistory()
    assert hist.load(path)
    assert hist.commands() == ["newer", "older"]
    assert hist.session_id == 3 + 1
    assert [e.timestamp for e in hist.entries] == [200, 100]


def test_clear():
    hist = CommandHistory()
    hist.add("a")
    hist.clear()
    assert len(hist) == 0
    assert hist.next_id == 1
    assert hist.current_index == 0


def test_search_and_last():
    hist = CommandHistory()
    for cmd in ["let x", "let y", "print x"]:
        hist.add(cmd)
    assert hist.search("let") == ["let x", "let y"]
    assert hist.search("") == []
    assert hist.last(2) == ["let y", "print x"]
    assert hist.last(10) == hist.commands()


def test_remove_adjusts_navigation():
    hist = CommandHistory()
    for cmd in ["a", "b", "c"]:
        hist.add(cmd)
    before = hist.current_index
    hist.remove(0)
    assert hist.commands() == ["b", "c"]
    assert hist.current_index == before - 1
    hist.remove(99)
    assert hist.commands() == ["b", "c"]


def test_expand():
    hist = CommandHistory()
    for cmd in ["let x", "print x", "let y"]:
        hist.add(cmd)
    assert hist.expand("!!") == "let y"
    assert hist.expand("!2") == "print x"
    assert hist.expand("!9") == "!9"
    assert hist.expand("!pri") == "print x"
    assert hist.expand("!let") == "let y"
    assert hist.expand("!zzz") == "!zzz"
    assert hist.expand("plain") == "plain"


def test_format_stats():
    hist = CommandHistory()
    empty = hist.format_stats()
    assert empty.startswith("Command History Statistics:")
    assert "Total commands:    0" in empty
    assert "Timespan" not in empty
    hist.entries.append(HistoryEntry("a", 0, 1))
    report = hist.format_stats()
    assert "Total commands:    1" in report
    assert "Timespan:" in report
    assert "Commands per day:" in report