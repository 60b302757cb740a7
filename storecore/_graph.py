"""
Computation graphs — nodnod nodes resolved with injected inputs.

    from storecore._graph import node, resolve

    @node
    class Greeting:
        def __init__(self, text: str) -> None:
            self.text = text

        @classmethod
        def __compose__(cls, req: Request) -> "Greeting":
            return cls(f"hi {req.name}")

    match await resolve(Greeting, Request("ana")):
        case Ok(greeting): ...
        case Error(e): ...   # ShopError raised as ShopFailure inside a node

Independent nodes run concurrently; a node waits only for the nodes
named in its `__compose__` signature.
"""

from __future__ import annotations

from typing import cast

from kungfu import Result, Ok, Error
from nodnod import Scope, Value, EventLoopAgent, Node
from nodnod import scalar_node as node

from storecore._errors import ShopError, ShopFailure


async def resolve[T](target: type[T], *inputs: object, detail: str = "resolve") -> Result[T, ShopError]:
    """
    Build the graph reaching `target`, inject `inputs` by their exact type, run it.

    ShopFailure raised by any node ends the run as Error(failure.error);
    other exceptions propagate.
    """
    agent = EventLoopAgent.build({cast(type[Node], target)})

    async with Scope(detail=detail) as scope:
        for value in inputs:
            scope.push(Value(type(value), value))

        try:
            await agent.run(local_scope=scope, mapped_scopes={})  # type: ignore[misc]
        except ShopFailure as failure:
            return Error(failure.error)

        resolved = scope.get(target)
        if resolved is None:
            raise KeyError(f"{target.__name__} was not resolved")
        return Ok(cast(T, resolved.value))


__all__ = ("node", "resolve")
