# tests/fixtures/schemas.py
"""Service SDL and operations shared across test modules."""

from fedshake.contracts import (
    FetchNode,
    FlattenNode,
    ParallelNode,
    QueryPlan,
    QueryPlanFieldNode,
    QueryPlanInlineFragmentNode,
    SequenceNode,
    ServiceDefinition,
)

# =============================================================================
# Two services: unused types, fields, arguments, scalars and enums
# =============================================================================

PRODUCTS_A_SDL = """
type Query {
  foo(a: String, b: Int): Foo
  bar(input: BarInput): Bar
  unusedRoot: Unused
}

type Foo @key(fields: "id") {
  id: ID!
  used: UsedEnum
  unused: UnusedEnum
}

type Bar @key(fields: "id") {
  id: ID!
  unused: String
}

input BarInput {
  used: String
  unused: Upload
}

scalar Upload

scalar UnusedScalar

enum UsedEnum {
  A
  B
}

enum UnusedEnum {
  C
}

type Unused {
  field: UnusedScalar
}
"""

PRODUCTS_B_SDL = """
type Query {
  baz: Baz
  qux: String
}

type Baz {
  used: String
  unused: String
}

type Bar @key(fields: "id") {
  id: ID!
  used: String
  unused: String
}
"""

PRODUCTS_OPERATION = """
query Products($input: BarInput) {
  foo(a: "x") {
    used
  }
  bar(input: $input) {
    id
    used
  }
  baz {
    used
  }
}
"""

ENTITIES_OPERATION = "query($representations: [_Any!]!) { _entities(representations: $representations) { ... on Bar { used } } }"


def products_services() -> list[ServiceDefinition]:
    return [
        ServiceDefinition.from_sdl("a", PRODUCTS_A_SDL, routing_url="http://a/graphql"),
        ServiceDefinition.from_sdl("b", PRODUCTS_B_SDL, routing_url="http://b/graphql"),
    ]


def products_plan() -> QueryPlan:
    """Plan a federation planner would produce for PRODUCTS_OPERATION."""
    return QueryPlan(
        node=SequenceNode(
            nodes=(
                ParallelNode(
                    nodes=(
                        FetchNode(
                            service_name="a",
                            operation='query Products($input: BarInput) { foo(a: "x") { used } bar(input: $input) { __typename id } }',
                            variable_usages=("input",),
                        ),
                        FetchNode(service_name="b", operation="query Products { baz { used } }"),
                    )
                ),
                FlattenNode(
                    path=("bar",),
                    node=FetchNode(
                        service_name="b",
                        operation=ENTITIES_OPERATION,
                        requires=(
                            QueryPlanInlineFragmentNode(
                                type_condition="Bar",
                                selections=(QueryPlanFieldNode(name="__typename"), QueryPlanFieldNode(name="id")),
                            ),
                        ),
                    ),
                ),
            )
        )
    )


# =============================================================================
# One service: interfaces and unions
# =============================================================================

ABSTRACT_SDL = """
type Query {
  animal: Animal
  result: Result
}

interface Animal {
  name: String
  unused: String
}

interface Node {
  id: ID!
}

type Dog implements Animal & Node {
  id: ID!
  name: String
  bark: String
  unused: String
  unused2: String
}

type Cat implements Animal {
  name: String
  unused: String
  purr: String
}

union Result = Success | Warning | Error

type Success {
  hooray: String
}

type Warning {
  info: String
}

type Error {
  reason: String
}
"""

ABSTRACT_OPERATION = """
query Test {
  animal {
    ... on Dog {
      name
      bark
    }
  }
  result {
    ... on Success {
      hooray
    }
    ... on Error {
      reason
    }
  }
}
"""

# =============================================================================
# Two services: @requires across services
# =============================================================================

REQUIRES_A_SDL = """
type Query {
  foo: Foo
}

type Foo @key(fields: "bar { id }") {
  bar: Bar
  baz: String @requires(fields: "bar { a b } quux")
  quux: String @external
}

type Bar @key(fields: "id") {
  id: ID!
  a: String @external
  b: String @external
  c: String @external
}
"""

REQUIRES_B_SDL = """
type Foo @key(fields: "bar { id }") {
  bar: Bar
  quux: String
  unused: String
}

type Bar @key(fields: "id") {
  id: ID!
  a: String
  b: String
  c: String
}
"""

REQUIRES_OPERATION = """
query Test {
  foo {
    baz
  }
}
"""


def requires_services() -> list[ServiceDefinition]:
    return [
        ServiceDefinition.from_sdl("a", REQUIRES_A_SDL),
        ServiceDefinition.from_sdl("b", REQUIRES_B_SDL),
    ]


def _foo_fragment(*selections: QueryPlanFieldNode) -> QueryPlanInlineFragmentNode:
    return QueryPlanInlineFragmentNode(type_condition="Foo", selections=(QueryPlanFieldNode(name="__typename"), *selections))


def requires_plan() -> QueryPlan:
    """Plan for REQUIRES_OPERATION: fetch Foo, get quux and Bar.a/b from b, then baz from a."""
    bar_id = QueryPlanFieldNode(name="bar", selections=(QueryPlanFieldNode(name="id"),))
    bar_full = QueryPlanFieldNode(
        name="bar",
        selections=(QueryPlanFieldNode(name="id"), QueryPlanFieldNode(name="a"), QueryPlanFieldNode(name="b")),
    )
    return QueryPlan(
        node=SequenceNode(
            nodes=(
                FetchNode(service_name="a", operation="query Test { foo { __typename bar { id } } }"),
                FlattenNode(
                    path=("foo",),
                    node=FetchNode(
                        service_name="b",
                        operation=(
                            "query($representations: [_Any!]!) { _entities(representations: $representations) "
                            "{ ... on Foo { bar { a b } quux } } }"
                        ),
                        requires=(_foo_fragment(bar_id),),
                    ),
                ),
                FlattenNode(
                    path=("foo",),
                    node=FetchNode(
                        service_name="a",
                        operation="query($representations: [_Any!]!) { _entities(representations: $representations) { ... on Foo { baz } } }",
                        requires=(_foo_fragment(bar_full, QueryPlanFieldNode(name="quux")),),
                    ),
                ),
            )
        )
    )
