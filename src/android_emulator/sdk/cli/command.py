from __future__ import annotations

import shlex
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Generic, Mapping, Optional, Sequence, Tuple, TypeVar

from android_emulator.errors import ConfigurationError
from android_emulator.sdk.proxy import mask_secrets

R = TypeVar("R")

OutputParser = Callable[[str], R]


def require_executable(executable: Any) -> str:
    text = "" if executable is None else str(executable).strip()
    if not text:
        raise ConfigurationError("Invalid empty or null executable")
    return text


@dataclass(frozen=True)
class CLICommand(Generic[R]):
    """A fully built command line: argv (executable first) plus its own environment.

    Instances are values; building one never starts a process.
    """

    argv: Tuple[str, ...]
    env: Mapping[str, str] = field(default_factory=dict)
    parser: Optional[OutputParser[R]] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        argv = tuple(str(a) for a in self.argv)
        if not argv or not argv[0]:
            raise ConfigurationError("Invalid empty or null executable")
        object.__setattr__(self, "argv", argv)
        object.__setattr__(self, "env", MappingProxyType(dict(self.env)))

    @classmethod
    def of(
        cls,
        executable: str,
        arguments: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        parser: Optional[OutputParser[R]] = None,
    ) -> "CLICommand[R]":
        return cls(argv=(executable, *arguments), env=dict(env or {}), parser=parser)

    @property
    def executable(self) -> str:
        return self.argv[0]

    @property
    def arguments(self) -> Tuple[str, ...]:
        return self.argv[1:]

    def with_parser(self, parser: OutputParser[R]) -> "CLICommand[R]":
        return replace(self, env=dict(self.env), parser=parser)

    def has_parser(self) -> bool:
        return self.parser is not None

    def parse(self, output: str) -> R:
        if self.parser is None:
            raise RuntimeError(f"{self.executable} command does not have an output parser")
        return self.parser(output)

    def to_display(self) -> str:
        """Shell-quoted command line with proxy passwords masked."""

        return mask_secrets(" ".join(shlex.quote(a) for a in self.argv))
