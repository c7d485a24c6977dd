# File: restgen/planner.py
"""
restgen - Route/Controller Planner
==================================
Derives, from a ``SchemaSnapshot``, one ``RouteSpec`` per table plus the
aggregate root ``RouteSpec`` that owns the index action and one bridge per
table segment.

Tables are processed in lexicographic order so that every downstream
artifact (file order, route order, bridge order) is deterministic.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from restgen.models import CRUD_ACTIONS, RoutePlan, RouteSpec, SchemaSnapshot, TableSchema
from restgen.utils import (
    assign_monikers,
    class_to_file,
    class_to_module,
    class_to_package_path,
    class_to_path,
    join_class,
    table_to_moniker,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("restgen.planner")


class RoutePlanner:
    """
    Map tables to controllers for application *class_name*.

        >>> plan = RoutePlanner("MyApp").plan(snapshot)
        >>> plan.tables[0].controller
        'MyApp::Controller::Users'
        >>> plan.root.bridges
        ['users']
    """

    def __init__(self, class_name: str) -> None:
        self.class_name: str = class_name
        self.controller_base: str = join_class(class_name, "Controller")

    def plan_table(self, table: TableSchema, moniker: Optional[str] = None) -> RouteSpec:
        moniker = moniker or table_to_moniker(table.name)
        controller: str = join_class(self.controller_base, moniker)

        if not table.primary_key:
            logger.warning(
                "Table '%s' has no primary key; update/delete will always fail.",
                table.name,
            )

        return RouteSpec(
            controller=controller,
            controller_path=class_to_path(controller),
            module=class_to_module(controller),
            segment=class_to_file(moniker),
            table=table.name,
            moniker=moniker,
            actions=dict(CRUD_ACTIONS),
        )

    def plan_root(self, segments: List[str]) -> RouteSpec:
        return RouteSpec(
            controller=self.controller_base,
            controller_path=class_to_package_path(self.controller_base),
            module=class_to_module(self.controller_base),
            bridges=sorted(segments),
        )

    def plan(self, snapshot: SchemaSnapshot) -> RoutePlan:
        monikers: Dict[str, str] = assign_monikers(snapshot.table_names)
        tables: List[RouteSpec] = [
            self.plan_table(snapshot.tables[name], monikers[name])
            for name in snapshot.table_names
        ]
        root: RouteSpec = self.plan_root([route.segment for route in tables])

        logger.info(
            "Planned %d table route(s) under %s.",
            len(tables),
            self.controller_base,
        )
        return RoutePlan(tables=tables, root=root)


__all__: List[str] = ["RoutePlanner"]

logger.debug("restgen.planner loaded.")
