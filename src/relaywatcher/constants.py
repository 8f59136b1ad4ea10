# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Shared constants for relay-watcher."""

from __future__ import annotations

# Subscription ids are the sole routing key for inbound batches.
SUBSCRIPTION_SCHEMA_SOURCE = "schema-source"
SUBSCRIPTION_FRONTEND_SOURCE = "frontend-source"

DEFAULT_SUBSCRIPTION_FIELDS: tuple[str, ...] = (
    "name",
    "size",
    "mtime_ms",
    "exists",
    "type",
)

DEFAULT_REQUIRED_CAPABILITIES: tuple[str, ...] = ("relative_root",)

# Compiler banner/footer lines excluded from logs.
DEFAULT_CODEGEN_HEADER_LINES = 4
DEFAULT_CODEGEN_FOOTER_LINES = 1

# Standard GraphQL introspection query.
INTROSPECTION_QUERY = """
  query IntrospectionQuery {
    __schema {
      queryType { name }
      mutationType { name }
      subscriptionType { name }
      types {
        ...FullType
      }
      directives {
        name
        description
        locations
        args {
          ...InputValue
        }
      }
    }
  }

  fragment FullType on __Type {
    kind
    name
    description
    fields(includeDeprecated: true) {
      name
      description
      args {
        ...InputValue
      }
      type {
        ...TypeRef
      }
      isDeprecated
      deprecationReason
    }
    inputFields {
      ...InputValue
    }
    interfaces {
      ...TypeRef
    }
    enumValues(includeDeprecated: true) {
      name
      description
      isDeprecated
      deprecationReason
    }
    possibleTypes {
      ...TypeRef
    }
  }

  fragment InputValue on __InputValue {
    name
    description
    type { ...TypeRef }
    defaultValue
  }

  fragment TypeRef on __Type {
    kind
    name
    ofType {
      kind
      name
      ofType {
        kind
        name
        ofType {
          kind
          name
          ofType {
            kind
            name
            ofType {
              kind
              name
              ofType {
                kind
                name
                ofType {
                  kind
                  name
                }
              }
            }
          }
        }
      }
    }
  }
"""

__all__ = [
    "DEFAULT_CODEGEN_FOOTER_LINES",
    "DEFAULT_CODEGEN_HEADER_LINES",
    "DEFAULT_REQUIRED_CAPABILITIES",
    "DEFAULT_SUBSCRIPTION_FIELDS",
    "INTROSPECTION_QUERY",
    "SUBSCRIPTION_FRONTEND_SOURCE",
    "SUBSCRIPTION_SCHEMA_SOURCE",
]
