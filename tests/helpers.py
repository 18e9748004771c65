"""Shared test helpers for unwrapping kungfu results."""

from kungfu import Ok, Error


def unwrap(result):
    match result:
        case Ok(value):
            return value
        case Error(error):
            raise AssertionError(f"expected Ok, got Error({error!r})")


def unwrap_err(result):
    match result:
        case Error(error):
            return error
        case Ok(value):
            raise AssertionError(f"expected Error, got Ok({value!r})")
