"""Port protocols for scoring extensions.

Extensions are the only producers of impacts, relations, and factor
definitions. The engine sees them through these protocols and orders them
purely by the names they declare; it never inspects their internal state.

Examples
--------
Implement an extension that contributes one impact:

>>> class Favourites:
...     name = "favourites"
...
...     def dependencies(self) -> tuple[str, ...]:
...         return ("DAH_factors",)
...
...     def contribute(self, context: Context) -> list[Impact | Relation]:
...         return [
...             Impact(
...                 contributors={"show": identity_matrix(context)},
...                 score=context.vector({"Additional": 1.0}),
...             )
...         ]
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .domain import Impact, Relation
    from .factors import Context, FactorDefinition


class Extension(typ.Protocol):
    """Produces impacts and relations once the context exists.

    Attributes
    ----------
    name : str
        Unique extension name, referenced by other extensions'
        ``dependencies``.

    Methods
    -------
    dependencies()
        Names of extensions that must be initialised first.
    contribute(context)
        Impacts and relations this extension adds to the snapshot.
    """

    @property
    def name(self) -> str:
        """Unique extension name."""
        ...

    def dependencies(self) -> cabc.Sequence[str]:
        """Return the names of extensions this one requires."""
        ...

    def contribute(self, context: Context) -> cabc.Sequence[Impact | Relation]:
        """Return impacts and relations built against ``context``.

        Parameters
        ----------
        context : Context
            The context built from every factor provider.

        Returns
        -------
        Sequence[Impact | Relation]
            Values to add to the aggregation snapshot.
        """
        ...


@typ.runtime_checkable
class FactorProvider(typ.Protocol):
    """Publishes factor catalog entries consumed before the context exists."""

    def factor_definitions(self) -> cabc.Sequence[FactorDefinition]:
        """Return the factors this extension defines, in index order."""
        ...
