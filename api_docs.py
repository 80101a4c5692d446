"""
OpenAPI 3.0 description of the JSON API, served at /api/docs and rendered
by the /api-docs page.
"""


def _ref(name):
    return {"$ref": f"#/components/schemas/{name}"}


def _json(schema, description):
    return {"description": description, "content": {"application/json": {"schema": schema}}}


def _error(description):
    return _json(_ref("Error"), description)


UNAUTHENTICATED = _error("Not authenticated")
FORBIDDEN = _error("Access denied")
NOT_FOUND = _error("Not found")
VALIDATION_FAILED = _json(_ref("ValidationError"), "Validation failed")

TRANSACTION_ID = {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}

SCHEMAS = {
    "User": {
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "email": {"type": "string", "format": "email"},
            "name": {"type": "string", "nullable": True},
            "phone": {"type": "string", "nullable": True},
            "image": {"type": "string", "nullable": True},
            "role": {"type": "string", "enum": ["USER", "ADMIN"]},
            "createdAt": {"type": "string", "format": "date-time"},
            "updatedAt": {"type": "string", "format": "date-time"},
        },
        "required": ["id", "email", "role"],
    },
    "UserBasic": {
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "name": {"type": "string", "nullable": True},
            "email": {"type": "string"},
        },
    },
    "Transaction": {
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "concept": {"type": "string"},
            "amount": {"type": "number"},
            "date": {"type": "string", "format": "date"},
            "type": {"type": "string", "enum": ["INCOME", "EXPENSE"]},
            "userId": {"type": "string"},
            "user": _ref("UserBasic"),
        },
        "required": ["id", "concept", "amount", "date", "type", "userId"],
    },
    "TransactionInput": {
        "type": "object",
        "properties": {
            "concept": {"type": "string", "maxLength": 100},
            "amount": {"type": "number", "minimum": 0, "exclusiveMinimum": True, "maximum": 999999999},
            "date": {"type": "string", "format": "date"},
            "type": {"type": "string", "enum": ["INCOME", "EXPENSE"]},
        },
        "required": ["concept", "amount", "date", "type"],
    },
    "PaginationInfo": {
        "type": "object",
        "properties": {
            "page": {"type": "integer"},
            "limit": {"type": "integer"},
            "total": {"type": "integer"},
            "pages": {"type": "integer"},
        },
    },
    "ReportSummary": {
        "type": "object",
        "properties": {
            "totalIncome": {"type": "number"},
            "totalExpense": {"type": "number"},
            "balance": {"type": "number"},
            "transactionCount": {"type": "integer"},
            "period": {"type": "string"},
            "startDate": {"type": "string", "format": "date"},
            "endDate": {"type": "string", "format": "date"},
        },
    },
    "ChartData": {
        "type": "object",
        "properties": {
            "date": {"type": "string", "format": "date"},
            "income": {"type": "number"},
            "expense": {"type": "number"},
        },
    },
    "CategoryStats": {
        "type": "object",
        "properties": {
            "concept": {"type": "string"},
            "income": {"type": "number"},
            "expense": {"type": "number"},
            "count": {"type": "integer"},
        },
    },
    "Error": {
        "type": "object",
        "properties": {"error": {"type": "string"}},
        "required": ["error"],
    },
    "ValidationError": {
        "type": "object",
        "properties": {
            "error": {"type": "string"},
            "errors": {"type": "array", "items": {"type": "string"}},
        },
        "required": ["error", "errors"],
    },
}

TAGS = [
    {"name": "Authentication", "description": "GitHub sign-in and the current session"},
    {"name": "Transactions", "description": "Income and expense records"},
    {"name": "Admin", "description": "User management and reports, ADMIN only"},
    {"name": "Profile", "description": "The signed-in user"},
]

PATHS = {
    "/api/auth/signin/github": {
        "get": {
            "tags": ["Authentication"],
            "summary": "Start GitHub sign-in",
            "security": [],
            "responses": {"302": {"description": "Redirect to GitHub"}},
        },
    },
    "/api/auth/session": {
        "get": {
            "tags": ["Authentication"],
            "summary": "Current session",
            "description": "Both fields are null when nobody is signed in.",
            "security": [],
            "responses": {
                "200": _json(
                    {
                        "type": "object",
                        "properties": {
                            "user": {"allOf": [_ref("UserBasic")], "nullable": True},
                            "session": {
                                "type": "object",
                                "nullable": True,
                                "properties": {"id": {"type": "string"}, "expires": {"type": "string"}},
                            },
                        },
                    },
                    "The signed-in user, if any",
                ),
            },
        },
    },
    "/api/auth/signout": {
        "post": {
            "tags": ["Authentication"],
            "summary": "Delete the current session",
            "responses": {"200": {"description": "Signed out"}},
        },
    },
    "/api/transactions": {
        "get": {
            "tags": ["Transactions"],
            "summary": "List transactions",
            "description": "Administrators see every row, everyone else only their own.",
            "parameters": [
                {"name": "page", "in": "query", "schema": {"type": "integer", "default": 1}},
                {"name": "limit", "in": "query", "schema": {"type": "integer", "default": 10}},
                {"name": "type", "in": "query", "schema": {"type": "string", "enum": ["INCOME", "EXPENSE"]}},
                {"name": "search", "in": "query", "schema": {"type": "string"}},
            ],
            "responses": {
                "200": _json(
                    {
                        "type": "object",
                        "properties": {
                            "transactions": {"type": "array", "items": _ref("Transaction")},
                            "pagination": _ref("PaginationInfo"),
                        },
                    },
                    "One page of transactions",
                ),
                "401": UNAUTHENTICATED,
            },
        },
        "post": {
            "tags": ["Transactions"],
            "summary": "Create a transaction (ADMIN)",
            "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("TransactionInput")}}},
            "responses": {
                "201": _json(_ref("Transaction"), "Created"),
                "400": VALIDATION_FAILED,
                "401": UNAUTHENTICATED,
                "403": FORBIDDEN,
            },
        },
    },
    "/api/transactions/{id}": {
        "get": {
            "tags": ["Transactions"],
            "summary": "Get one transaction",
            "parameters": [TRANSACTION_ID],
            "responses": {
                "200": _json(_ref("Transaction"), "The transaction"),
                "401": UNAUTHENTICATED,
                "403": FORBIDDEN,
                "404": NOT_FOUND,
            },
        },
        "put": {
            "tags": ["Transactions"],
            "summary": "Update a transaction (ADMIN)",
            "description": "Fields left out of the body keep their stored values.",
            "parameters": [TRANSACTION_ID],
            "requestBody": {"required": True, "content": {"application/json": {"schema": _ref("TransactionInput")}}},
            "responses": {
                "200": _json(_ref("Transaction"), "Updated"),
                "400": VALIDATION_FAILED,
                "401": UNAUTHENTICATED,
                "403": FORBIDDEN,
                "404": NOT_FOUND,
            },
        },
        "delete": {
            "tags": ["Transactions"],
            "summary": "Delete a transaction (ADMIN)",
            "parameters": [TRANSACTION_ID],
            "responses": {
                "200": {"description": "Deleted"},
                "401": UNAUTHENTICATED,
                "403": FORBIDDEN,
                "404": NOT_FOUND,
            },
        },
    },
    "/api/admin/users": {
        "get": {
            "tags": ["Admin"],
            "summary": "List users, newest first",
            "responses": {
                "200": _json({"type": "array", "items": _ref("User")}, "Every user"),
                "401": UNAUTHENTICATED,
                "403": FORBIDDEN,
            },
        },
        "patch": {
            "tags": ["Admin"],
            "summary": "Change a user's role",
            "requestBody": {
                "required": True,
                "content": {
                    "application/json": {
                        "schema": {
                            "type": "object",
                            "properties": {
                                "userId": {"type": "string"},
                                "role": {"type": "string", "enum": ["USER", "ADMIN"]},
                            },
                            "required": ["userId", "role"],
                        }
                    }
                },
            },
            "responses": {
                "200": _json(_ref("UserBasic"), "Updated"),
                "400": _error("Missing or invalid userId/role"),
                "401": UNAUTHENTICATED,
                "403": FORBIDDEN,
                "404": NOT_FOUND,
            },
        },
    },
    "/api/admin/reports": {
        "get": {
            "tags": ["Admin"],
            "summary": "Financial report over every user's transactions",
            "parameters": [
                {"name": "period", "in": "query", "schema": {"type": "string", "enum": ["week", "month", "year"]}},
                {"name": "start", "in": "query", "schema": {"type": "string", "format": "date"}},
                {"name": "end", "in": "query", "schema": {"type": "string", "format": "date"}},
                {"name": "format", "in": "query", "schema": {"type": "string", "enum": ["json", "csv"]}},
            ],
            "responses": {
                "200": {
                    "description": "Report as JSON, or a CSV attachment when format=csv",
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "summary": _ref("ReportSummary"),
                                    "chartData": {"type": "array", "items": _ref("ChartData")},
                                    "categoryStats": {"type": "array", "items": _ref("CategoryStats")},
                                    "transactions": {"type": "array", "items": _ref("Transaction")},
                                },
                            }
                        },
                        "text/csv": {"schema": {"type": "string"}},
                    },
                },
                "400": _error("Invalid date range"),
                "401": UNAUTHENTICATED,
                "403": FORBIDDEN,
            },
        },
    },
    "/api/user/profile": {
        "get": {
            "tags": ["Profile"],
            "summary": "The signed-in user's profile",
            "responses": {
                "200": _json(_ref("User"), "Profile"),
                "401": UNAUTHENTICATED,
            },
        },
    },
}


def openapi_document(server_url, cookie_name="session-token"):
    return {
        "openapi": "3.0.3",
        "info": {
            "title": "FinTrack API",
            "version": "1.0.0",
            "description": "Income and expense tracking with GitHub sign-in and role-based access",
        },
        "servers": [{"url": server_url}],
        "tags": TAGS,
        "components": {
            "securitySchemes": {
                "SessionAuth": {"type": "apiKey", "in": "cookie", "name": cookie_name},
            },
            "schemas": SCHEMAS,
        },
        "security": [{"SessionAuth": []}],
        "paths": PATHS,
    }


def endpoint_rows(document):
    """Flatten `paths` into (method, path, operation) rows for the docs page."""
    rows = []
    for path, operations in document["paths"].items():
        for method, operation in operations.items():
            rows.append((method.upper(), path, operation))
    return rows
