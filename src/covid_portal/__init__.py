"""
COVID-19 India portal API package.

Modules:
- config: environment-driven settings
- logging_config: Loguru setup + stdlib logging interception
- db: relational store (SQLite / PostgreSQL) + query helpers
- auth_utils: password verification and JWT auth helpers
- schemas: Pydantic models for the REST API
- mappers: row -> response shape converters
- main: FastAPI application and routes
"""
