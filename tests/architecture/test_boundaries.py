from pytest_archon import archrule


def test_models_independence() -> None:
    """
    Models are the foundation: envelopes, results and domain types.
    They must not import ports, routing or any adapter.
    """
    (
        archrule("models_are_independent")
        .match("obp_adapter.models*")
        .should_not_import("obp_adapter.ports*")
        .should_not_import("obp_adapter.routing*")
        .should_not_import("obp_adapter.transport*")
        .should_not_import("obp_adapter.telemetry*")
        .should_not_import("obp_adapter.counters*")
        .should_not_import("obp_adapter.connectors*")
        .check("obp_adapter")
    )


def test_ports_layering() -> None:
    """
    Ports (protocols) should not depend on their implementations.
    """
    (
        archrule("ports_layering")
        .match("obp_adapter.ports*")
        .should_not_import("obp_adapter.telemetry*")
        .should_not_import("obp_adapter.counters*")
        .should_not_import("obp_adapter.connectors*")
        .should_not_import("obp_adapter.transport*")
        .should_not_import("obp_adapter.routing*")
        .check("obp_adapter")
    )


def test_routing_transport_agnostic() -> None:
    """
    The router only sees ports. Transport, concrete connectors and counter
    stores are wired in by the bootstrap.
    """
    (
        archrule("routing_transport_agnostic")
        .match("obp_adapter.routing*")
        .should_not_import("obp_adapter.transport*")
        .should_not_import("obp_adapter.connectors*")
        .should_not_import("obp_adapter.counters*")
        .should_not_import("aio_pika*")
        .should_not_import("redis*")
        .check("obp_adapter")
    )


def test_connectors_isolation() -> None:
    """
    Connectors talk to the backend only; routing and transport are not theirs.
    """
    (
        archrule("connectors_isolation")
        .match("obp_adapter.connectors*")
        .should_not_import("obp_adapter.routing*")
        .should_not_import("obp_adapter.transport*")
        .should_not_import("obp_adapter.telemetry*")
        .should_not_import("obp_adapter.counters*")
        .check("obp_adapter")
    )


def test_sinks_and_stores_isolation() -> None:
    """
    Telemetry sinks and counter stores implement ports and nothing else.
    """
    (
        archrule("sinks_and_stores_isolation")
        .match("obp_adapter.telemetry*")
        .match("obp_adapter.counters*")
        .should_not_import("obp_adapter.routing*")
        .should_not_import("obp_adapter.transport*")
        .should_not_import("obp_adapter.connectors*")
        .check("obp_adapter")
    )


def test_entry_points_are_leaves() -> None:
    """
    Nothing below the entry points may import the CLI, bootstrap or status app.
    """
    (
        archrule("entry_points_are_leaves")
        .match("obp_adapter.models*")
        .match("obp_adapter.ports*")
        .match("obp_adapter.routing*")
        .match("obp_adapter.transport*")
        .match("obp_adapter.telemetry*")
        .match("obp_adapter.counters*")
        .match("obp_adapter.connectors*")
        .should_not_import("obp_adapter.cli")
        .should_not_import("obp_adapter.bootstrap")
        .should_not_import("obp_adapter.status")
        .check("obp_adapter")
    )
