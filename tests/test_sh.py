import io

import pytest

from miniunix.riscv import OpenFlag
from miniunix.sh import (
    MAXARGS,
    BackCmd,
    ExecCmd,
    ListCmd,
    PipeCmd,
    RedirCmd,
    Shell,
    ShellSyntaxError,
    gettoken,
    parse_command,
)


def test_gettoken_word_and_position():
    s = "  ls | wc"
    kind, start, end, pos = gettoken(s, 0)
    assert kind == "a"
    assert s[start:end] == "ls"
    assert s[pos] == "|"


def test_gettoken_append_and_end():
    kind, start, end, pos = gettoken(">> f", 0)
    assert kind == "+"
    assert gettoken("   ", 0)[0] == ""


def test_parse_exec():
    assert parse_command("echo hi there\n") == ExecCmd(["echo", "hi", "there"])


def test_parse_pipe_list_back():
    assert parse_command("a | b") == PipeCmd(ExecCmd(["a"]), ExecCmd(["b"]))
    assert parse_command("a ; b") == ListCmd(ExecCmd(["a"]), ExecCmd(["b"]))
    assert parse_command("a &") == BackCmd(ExecCmd(["a"]))


def test_parse_redirections():
    cmd = parse_command("cat < in > out")
    inner = RedirCmd(ExecCmd(["cat"]), "in", OpenFlag.RDONLY, 0)
    assert cmd == RedirCmd(
        inner, "out", OpenFlag.WRONLY | OpenFlag.CREATE | OpenFlag.TRUNC, 1
    )
    append = parse_command("echo x >> log")
    assert append.mode == OpenFlag.WRONLY | OpenFlag.CREATE
    assert append.fd == 1


def test_parse_block_with_redirection():
    cmd = parse_command("(a ; b) > f")
    assert isinstance(cmd, RedirCmd)
    assert cmd.cmd == ListCmd(ExecCmd(["a"]), ExecCmd(["b"]))


@pytest.mark.parametrize(
    "line, message",
    [
        ("a <", "missing file for redirection"),
        ("a > |", "missing file for redirection"),
        ("(a", "syntax - missing )"),
        ("a ) b", "syntax"),
    ],
)
def test_parse_errors(line, message):
    with pytest.raises(ShellSyntaxError) as info:
        parse_command(line)
    assert str(info.value) == message


def test_leftovers_recorded():
    with pytest.raises(ShellSyntaxError) as info:
        parse_command("a ) b")
    assert info.value.leftovers == ") b"


def test_argument_limit():
    words = [f"w{i}" for i in range(MAXARGS - 1)]
    assert parse_command(" ".join(words)).argv == words
    with pytest.raises(ShellSyntaxError, match="too many args"):
        parse_command(" ".join(words + ["last"]))


def test_pipeline_runs(tmp_path):
    out = io.StringIO()
    status = Shell(cwd=tmp_path).run_line("echo hello | grep ell\n", io.StringIO(), out)
    assert status == 0
    assert out.getvalue() == "hello\n"


def test_redirect_round_trip(tmp_path):
    shell = Shell(cwd=tmp_path)
    shell.run_line("echo hi > f\n", io.StringIO(), io.StringIO())
    assert (tmp_path / "f").read_text() == "hi\n"
    out = io.StringIO()
    shell.run_line("cat < f\n", io.StringIO(), out)
    assert out.getvalue() == "hi\n"


def test_append_redirect_overwrites_from_start(tmp_path):
    shell = Shell(cwd=tmp_path)
    shell.run_line("echo abcdef > f\n", io.StringIO(), io.StringIO())
    shell.run_line("echo xy >> f\n", io.StringIO(), io.StringIO())
    assert (tmp_path / "f").read_text() == "xy\ndef\n"


def test_list_and_background(tmp_path):
    shell = Shell(cwd=tmp_path)
    out = io.StringIO()
    shell.run_line("echo a ; echo b\n", io.StringIO(), out)
    assert out.getvalue() == "a\nb\n"
    out = io.StringIO()
    assert shell.run_line("echo c &\n", io.StringIO(), out) == 0
    assert out.getvalue() == "c\n"


def test_unknown_program(tmp_path):
    err = io.StringIO()
    status = Shell(cwd=tmp_path, stderr=err).run_line("nosuch\n", io.StringIO(), io.StringIO())
    assert err.getvalue() == "exec nosuch failed\n"
    assert status == 0


def test_open_failure(tmp_path):
    err = io.StringIO()
    status = Shell(cwd=tmp_path, stderr=err).run_line("cat < missing\n", io.StringIO(), io.StringIO())
    assert status == 1
    assert err.getvalue() == "open missing failed\n"


def test_syntax_error_reported(tmp_path):
    err = io.StringIO()
    status = Shell(cwd=tmp_path, stderr=err).run_line("echo a )\n", io.StringIO(), io.StringIO())
    assert status == 1
    assert err.getvalue().endswith("syntax\n")
    assert err.getvalue().startswith("leftovers: ")


def test_cd(tmp_path):
    (tmp_path / "sub").mkdir()
    err = io.StringIO()
    shell = Shell(cwd=tmp_path, stderr=err)
    assert shell.run_line("cd sub\n", io.StringIO(), io.StringIO()) == 0
    assert shell.cwd == (tmp_path / "sub").resolve()
    assert shell.run_line("cd nosuch\n", io.StringIO(), io.StringIO()) == 1
    assert err.getvalue() == "cannot cd nosuch\n"


def test_custom_commands(tmp_path):
    def upper(argv, stdin, stdout, stderr):
        stdout.write(stdin.read().upper())
        return 3

    shell = Shell(commands={"up": upper}, cwd=tmp_path)
    out = io.StringIO()
    assert shell.run(parse_command("up"), io.StringIO("abc"), out) == 3
    assert out.getvalue() == "ABC"


def test_repl(tmp_path):
    out = io.StringIO()
    err = io.StringIO()
    Shell(cwd=tmp_path).repl(io.StringIO("echo one\n\necho two\n"), out, err)
    assert out.getvalue() == "one\ntwo\n"
    assert err.getvalue() == "$ " * 4