"""Routing: the dispatcher's route table.

Routes are registered when the app is finalized and matched in
registration order.
"""

from trellis.routing.params import PathPattern, compile_path
from trellis.routing.route import Route, RouteMatch
from trellis.routing.router import Router

__all__ = ["PathPattern", "Route", "RouteMatch", "Router", "compile_path"]
