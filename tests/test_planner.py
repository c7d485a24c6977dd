"""
tests/test_planner.py
Unit tests for restgen.planner (table → controller mapping).
"""

from __future__ import annotations

from restgen.models import CRUD_ACTIONS, SchemaSnapshot, TableSchema
from restgen.planner import RoutePlanner


class TestPlanTable:
    def test_users_route(self, users_table: TableSchema) -> None:
        route = RoutePlanner("MyApp").plan_table(users_table)

        assert route.controller == "MyApp::Controller::Users"
        assert route.controller_path == "MyApp/Controller/Users.py"
        assert route.module == "MyApp.Controller.Users"
        assert route.segment == "users"
        assert route.table == "users"
        assert route.moniker == "Users"
        assert route.actions == CRUD_ACTIONS
        assert not route.is_root

    def test_multi_word_table(self, order_items_table: TableSchema) -> None:
        route = RoutePlanner("MyApp").plan_table(order_items_table)
        assert route.controller == "MyApp::Controller::OrderItems"
        assert route.segment == "orderitems"

    def test_nested_application_name(self, users_table: TableSchema) -> None:
        route = RoutePlanner("My::App").plan_table(users_table)
        assert route.controller == "My::App::Controller::Users"
        assert route.controller_path == "My/App/Controller/Users.py"
        assert route.module == "My.App.Controller.Users"

    def test_actions_are_copied(self, users_table: TableSchema) -> None:
        route = RoutePlanner("MyApp").plan_table(users_table)
        route.actions["extra"] = "nothing"
        assert "extra" not in CRUD_ACTIONS


class TestPlan:
    def test_tables_in_lexicographic_order(self, snapshot: SchemaSnapshot) -> None:
        plan = RoutePlanner("MyApp").plan(snapshot)
        assert [route.table for route in plan.tables] == ["audit_log", "order_items", "users"]

    def test_root_route(self, snapshot: SchemaSnapshot) -> None:
        root = RoutePlanner("MyApp").plan(snapshot).root

        assert root.is_root
        assert root.controller == "MyApp::Controller"
        assert root.controller_path == "MyApp/Controller/__init__.py"
        assert root.module == "MyApp.Controller"
        assert root.bridges == ["auditlog", "orderitems", "users"]
        assert root.actions == {}

    def test_empty_schema(self) -> None:
        plan = RoutePlanner("MyApp").plan(SchemaSnapshot())
        assert plan.tables == []
        assert plan.root.bridges == []

    def test_plan_root_sorts_segments(self) -> None:
        root = RoutePlanner("MyApp").plan_root(["users", "accounts"])
        assert root.bridges == ["accounts", "users"]

    def test_colliding_tables_get_distinct_routes(self) -> None:
        names = ["Users", "users", "model", "basic"]
        snapshot = SchemaSnapshot.from_tables(
            [TableSchema(name=n, columns=[{"name": "id"}], primary_key=["id"]) for n in names]
        )
        plan = RoutePlanner("MyApp").plan(snapshot)

        routes = {route.table: route for route in plan.tables}
        assert routes["Users"].moniker == "Users"
        assert routes["users"].moniker == "Users2"
        assert routes["users"].module == "MyApp.Controller.Users2"
        assert routes["model"].moniker == "Model2"
        assert routes["basic"].segment == "basic"
        assert plan.root.bridges == ["basic", "model2", "users", "users2"]
