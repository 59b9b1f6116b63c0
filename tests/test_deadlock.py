import io

from uarchsim.deadlock import format_deadlock, print_deadlock


def pack(entry):
    return (entry["id"], entry["addr"])


FMT = "instr_id: {} address: {:#x}"


def test_empty_range():
    assert format_deadlock([], "RQ", FMT, pack) == "RQ empty\n\n"


def test_single_entry_line():
    out = format_deadlock([{"id": 7, "addr": 0x40}], "RQ", FMT, pack)
    assert out == "[RQ] entry:   0 instr_id: 7 address: 0x40\n\n"


def test_none_entries_are_empty():
    out = format_deadlock([None, {"id": 1, "addr": 0x80}], "WQ", FMT, pack)
    lines = out.splitlines()
    assert lines[0].endswith(" empty")
    assert "instr_id: 1" in lines[1]


def test_one_line_per_entry_plus_blank():
    entries = [{"id": i, "addr": i * 64} for i in range(12)]
    out = format_deadlock(entries, "PQ", FMT, pack)
    lines = out.split("\n")
    assert len(lines) == len(entries) + 2
    assert lines[-1] == "" and lines[-2] == ""
    for j, line in enumerate(lines[: len(entries)]):
        assert line.startswith(f"[PQ] entry: {j:>3} ")


def test_accepts_generators():
    out = format_deadlock(({"id": i, "addr": 0} for i in range(2)), "Q", FMT, pack)
    assert out.count("[Q] entry:") == 2


def test_print_writes_to_file():
    buf = io.StringIO()
    entries = [{"id": 3, "addr": 0x100}]
    print_deadlock(entries, "RQ", FMT, pack, file=buf)
    assert buf.getvalue() == format_deadlock(entries, "RQ", FMT, pack)


def test_print_empty_to_file():
    buf = io.StringIO()
    print_deadlock([], "MSHR", FMT, pack, file=buf)
    assert buf.getvalue() == "MSHR empty\n\n"