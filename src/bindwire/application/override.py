from bindwire.application.module import Module


class OverrideBuilder:
    """Builds a module whose bindings replace those of a source module.

    See override().
    """

    def __init__(self, source: Module) -> None:
        self._source = source

    def with_(self, *overrides: Module) -> Module:
        """Create a module from the source and every override, last one winning.

        Keys bound only on one side are kept. Declaration errors and eager keys
        of every module are concatenated. No module passed in is modified.
        """
        merged = Module()
        _add_bindings(merged, self._source)
        for override_module in overrides:
            _add_bindings(merged, override_module)
        return merged


def _add_bindings(target: Module, source: Module) -> None:
    # Keys already present are replaced.
    target._bindings.update(source.bindings)
    for error in source.binding_errors:
        target.add_binding_error(error)
    target.add_eager_keys(source.eager_keys)


def override(source: Module) -> OverrideBuilder:
    """Return a builder replacing bindings of source with those of other modules.

    Intended for tests, to substitute production bindings with test doubles:

    Example:
        >>> module = override(production_module).with_(test_module)
    """
    return OverrideBuilder(source)
