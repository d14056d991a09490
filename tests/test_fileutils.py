import multiprocessing
import os
import time

from miniunix.fileutils import kill_main, ln_main, mkdir_main, rm_main


def test_ln_usage(capsys):
    assert ln_main(["only"]) == 1
    assert capsys.readouterr().err == "Usage: ln old new\n"


def test_ln_creates_link(tmp_path):
    old = tmp_path / "old"
    new = tmp_path / "new"
    old.write_text("data")
    assert ln_main([str(old), str(new)]) == 0
    assert os.path.samefile(old, new)


def test_ln_failure_reported(tmp_path, capsys):
    old = str(tmp_path / "missing")
    new = str(tmp_path / "new")
    assert ln_main([old, new]) == 0
    assert capsys.readouterr().err == f"link {old} {new}: failed\n"
    assert not os.path.exists(new)


def test_rm_usage(capsys):
    assert rm_main([]) == 1
    assert capsys.readouterr().err == "Usage: rm files...\n"


def test_rm_files_and_empty_dir(tmp_path):
    f = tmp_path / "f"
    d = tmp_path / "d"
    f.write_text("")
    d.mkdir()
    assert rm_main([str(f), str(d)]) == 0
    assert list(tmp_path.iterdir()) == []


def test_rm_stops_at_first_failure(tmp_path, capsys):
    a = tmp_path / "a"
    b = tmp_path / "b"
    a.write_text("")
    b.write_text("")
    missing = str(tmp_path / "missing")
    assert rm_main([str(a), missing, str(b)]) == 0
    assert not a.exists()
    assert b.exists()
    assert capsys.readouterr().err == f"rm: {missing} failed to delete\n"


def test_mkdir(tmp_path):
    first = tmp_path / "one"
    second = tmp_path / "two"
    assert mkdir_main([str(first), str(second)]) == 0
    assert first.is_dir() and second.is_dir()


def test_mkdir_stops_at_first_failure(tmp_path, capsys):
    existing = tmp_path / "e"
    existing.mkdir()
    later = tmp_path / "later"
    assert mkdir_main([str(existing), str(later)]) == 0
    assert not later.exists()
    assert capsys.readouterr().err == f"mkdir: {existing} failed to create\n"


def test_mkdir_usage(capsys):
    assert mkdir_main([]) == 1
    assert capsys.readouterr().err == "Usage: mkdir files...\n"


def test_kill_usage(capsys):
    assert kill_main([]) == 1
    assert capsys.readouterr().err == "usage: kill pid...\n"


def test_kill_terminates_process():
    proc = multiprocessing.Process(target=time.sleep, args=(30,))
    proc.start()
    try:
        assert kill_main([str(proc.pid)]) == 0
        proc.join(10)
        assert proc.exitcode is not None and proc.exitcode < 0
    finally:
        if proc.is_alive():
            proc.terminate()
            proc.join()