"""dtsbundle custom exceptions."""

from __future__ import annotations


class BundleError(Exception):
    """Base exception for dtsbundle errors."""


class ConfigurationError(BundleError):
    """Entry point cannot be mapped onto the program."""


class InvariantError(BundleError):
    """An internal assumption about the program model does not hold."""


class SnapshotError(BundleError):
    """Error reading a program snapshot."""


class ClassDeclarationError(BundleError):
    """Class declarations survived into an output that forbids them."""

    def __init__(self, class_names: list[str]) -> None:
        self.class_names = class_names
        super().__init__(
            f"{len(class_names)} class statement(s) are found in generated dts: "
            f"{', '.join(class_names)}"
        )
