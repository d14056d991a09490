"""Parsing and running command lines: pipes, lists, redirection and background jobs."""

import io
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .grep import grep
from .riscv import OpenFlag
from .textutils import cat, count, echo
from .ulib import gets

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
MAXARGS = 10
_LINE_BUFSIZE = 100

_REDIRECTIONS = {
    "<": (OpenFlag.RDONLY, 0),
    ">": (OpenFlag.WRONLY | OpenFlag.CREATE | OpenFlag.TRUNC, 1),
    "+": (OpenFlag.WRONLY | OpenFlag.CREATE, 1),
}


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed."""

    def __init__(self, message, leftovers=None):
        super().__init__(message)
        self.leftovers = leftovers


@dataclass
class ExecCmd:
    """Run a program with arguments."""

    argv: list = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run a command with file descriptor fd connected to a file."""

    cmd: object
    file: str
    mode: OpenFlag
    fd: int


@dataclass
class PipeCmd:
    """Feed the output of left into right."""

    left: object
    right: object


@dataclass
class ListCmd:
    """Run left, then right."""

    left: object
    right: object


@dataclass
class BackCmd:
    """Run a command without waiting for its status."""

    cmd: object


def gettoken(s, pos=0):
    """Scan one token from s at pos.

    Returns (kind, start, end, next_pos): kind is "" at the end of input,
    "a" for a word, "+" for ">>", or the symbol itself; s[start:end] is the
    token text and next_pos lies past any following whitespace.
    """
    end = len(s)
    while pos < end and s[pos] in WHITESPACE:
        pos += 1
    start = pos
    c = s[pos] if pos < end else ""
    kind = c
    if c == "":
        pass
    elif c in "|();&<":
        pos += 1
    elif c == ">":
        pos += 1
        if pos < end and s[pos] == ">":
            kind = "+"
            pos += 1
    else:
        kind = "a"
        while pos < end and s[pos] not in WHITESPACE and s[pos] not in SYMBOLS:
            pos += 1
    token_end = pos
    while pos < end and s[pos] in WHITESPACE:
        pos += 1
    return kind, start, token_end, pos


class _Parser:
    def __init__(self, s):
        self.s = s
        self.pos = 0

    def peek(self, toks):
        s = self.s
        while self.pos < len(s) and s[self.pos] in WHITESPACE:
            self.pos += 1
        return self.pos < len(s) and s[self.pos] in toks

    def token(self):
        kind, start, end, self.pos = gettoken(self.s, self.pos)
        return kind, self.s[start:end]

    def line(self):
        cmd = self.pipe()
        while self.peek("&"):
            self.token()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.token()
            cmd = ListCmd(cmd, self.line())
        return cmd

    def pipe(self):
        cmd = self.exec()
        if self.peek("|"):
            self.token()
            cmd = PipeCmd(cmd, self.pipe())
        return cmd

    def redirs(self, cmd):
        while self.peek("<>"):
            kind, _ = self.token()
            file_kind, name = self.token()
            if file_kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            mode, fd = _REDIRECTIONS[kind]
            cmd = RedirCmd(cmd, name, mode, fd)
        return cmd

    def block(self):
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.token()
        cmd = self.line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.token()
        return self.redirs(cmd)

    def exec(self):
        if self.peek("("):
            return self.block()
        inner = ExecCmd()
        cmd = self.redirs(inner)
        while not self.peek("|)&;"):
            kind, word = self.token()
            if kind == "":
                break
            if kind != "a":
                raise ShellSyntaxError("syntax")
            inner.argv.append(word)
            if len(inner.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            cmd = self.redirs(cmd)
        return cmd


def parse_command(s):
    """Parse a whole command line into a command tree."""
    parser = _Parser(s)
    cmd = parser.line()
    parser.peek("")
    if parser.pos != len(s):
        raise ShellSyntaxError("syntax", leftovers=s[parser.pos:])
    return cmd


class Shell:
    """Runs command trees against a table of in-process programs.

    A program is a callable (argv, stdin, stdout, stderr) -> exit status.
    Without an explicit table, echo, cat, grep and wc are available.
    """

    def __init__(self, commands=None, cwd=None, stderr=None):
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.stderr = stderr if stderr is not None else sys.stderr
        if commands is None:
            commands = {
                "echo": self._echo,
                "cat": self._cat,
                "grep": self._grep,
                "wc": self._wc,
            }
        self.commands = dict(commands)

    def run(self, cmd, stdin, stdout):
        """Execute a command tree and return its exit status."""
        if isinstance(cmd, ExecCmd):
            if not cmd.argv:
                return 1
            program = self.commands.get(cmd.argv[0])
            if program is None:
                self.stderr.write(f"exec {cmd.argv[0]} failed\n")
                return 0
            return program(list(cmd.argv), stdin, stdout, self.stderr)
        if isinstance(cmd, RedirCmd):
            try:
                stream = self._open(cmd.file, cmd.mode)
            except OSError:
                self.stderr.write(f"open {cmd.file} failed\n")
                return 1
            with stream:
                if cmd.fd == 0:
                    return self.run(cmd.cmd, stream, stdout)
                return self.run(cmd.cmd, stdin, stream)
        if isinstance(cmd, PipeCmd):
            pipe = io.StringIO()
            self.run(cmd.left, stdin, pipe)
            pipe.seek(0)
            self.run(cmd.right, pipe, stdout)
            return 0
        if isinstance(cmd, ListCmd):
            self.run(cmd.left, stdin, stdout)
            return self.run(cmd.right, stdin, stdout)
        if isinstance(cmd, BackCmd):
            self.run(cmd.cmd, stdin, stdout)
            return 0
        raise TypeError("runcmd")

    def run_line(self, line, stdin, stdout):
        """Handle one input line, including the cd built-in; return its status."""
        cmd = line.lstrip(" \t")
        if cmd.startswith("\n"):
            return 0
        if cmd.startswith("cd "):
            # The last character is taken to be the newline and dropped.
            return self._chdir(cmd[3:-1])
        try:
            parsed = parse_command(cmd)
        except ShellSyntaxError as exc:
            if exc.leftovers is not None:
                self.stderr.write(f"leftovers: {exc.leftovers}\n")
            self.stderr.write(f"{exc}\n")
            return 1
        return self.run(parsed, stdin, stdout)

    def repl(self, stdin, stdout, stderr=None):
        """Prompt, read and run lines until end of input."""
        if stderr is not None:
            self.stderr = stderr
        while True:
            self.stderr.write("$ ")
            line = gets(stdin, _LINE_BUFSIZE)
            if not line:
                break
            self.run_line(line, stdin, stdout)
        return 0

    def _chdir(self, target):
        new = self.cwd / target
        if not new.is_dir():
            self.stderr.write(f"cannot cd {target}\n")
            return 1
        self.cwd = new.resolve()
        return 0

    def _open(self, file, mode):
        access = mode & (OpenFlag.WRONLY | OpenFlag.RDWR)
        if access == OpenFlag.WRONLY:
            flags, text_mode = os.O_WRONLY, "w"
        elif access == OpenFlag.RDWR:
            flags, text_mode = os.O_RDWR, "r+"
        else:
            flags, text_mode = os.O_RDONLY, "r"
        if mode & OpenFlag.CREATE:
            flags |= os.O_CREAT
        if mode & OpenFlag.TRUNC:
            flags |= os.O_TRUNC
        fd = os.open(self.cwd / file, flags, 0o666)
        try:
            return open(fd, text_mode, encoding="utf-8", errors="replace")
        except OSError:
            os.close(fd)
            raise

    def _open_input(self, name):
        return open(self.cwd / name, encoding="utf-8", errors="replace")

    def _echo(self, argv, stdin, stdout, stderr):
        stdout.write(echo(argv[1:]))
        return 0

    def _cat(self, argv, stdin, stdout, stderr):
        if len(argv) <= 1:
            cat(stdin, stdout)
            return 0
        for name in argv[1:]:
            try:
                stream = self._open_input(name)
            except OSError:
                stderr.write(f"cat: cannot open {name}\n")
                return 1
            with stream:
                cat(stream, stdout)
        return 0

    def _grep(self, argv, stdin, stdout, stderr):
        if len(argv) <= 1:
            stderr.write("usage: grep pattern [file ...]\n")
            return 1
        pattern = argv[1]
        if len(argv) <= 2:
            grep(pattern, stdin, stdout)
            return 0
        for name in argv[2:]:
            try:
                stream = self._open_input(name)
            except OSError:
                stdout.write(f"grep: cannot open {name}\n")
                return 1
            with stream:
                grep(pattern, stream, stdout)
        return 0

    def _wc(self, argv, stdin, stdout, stderr):
        def report(result, name):
            stdout.write(f"{result.lines} {result.words} {result.chars} {name}\n")

        if len(argv) <= 1:
            report(count(stdin), "")
            return 0
        for name in argv[1:]:
            try:
                stream = self._open_input(name)
            except OSError:
                stdout.write(f"wc: cannot open {name}\n")
                return 1
            with stream:
                report(count(stream), name)
        return 0