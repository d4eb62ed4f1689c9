"""Typed models for parsed API description documents.

Raw OpenAPI / Swagger trees are converted into these models once, at load
time, so the comparator never has to probe optional fields on untyped dicts.
"""

from pydantic import BaseModel, Field

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"


class Param(BaseModel):
    """A single operation parameter (query, path, header, or cookie)."""

    name: str = ""
    location: str = ""  # query / path / header / cookie
    required: bool = False

    @property
    def key(self) -> tuple[str, str]:
        return (self.location, self.name)


class ApiResponse(BaseModel):
    """One entry of an operation's ``responses`` map."""

    description: str = ""
    content: dict[str, dict] = Field(default_factory=dict)  # {content_type: media object}
    schema_: dict | None = None  # Swagger 2.0 bare schema

    def extract_schema(self) -> dict | None:
        """Return the response schema: JSON content first, then XML, then the bare field."""
        for content_type in (JSON_CONTENT_TYPE, XML_CONTENT_TYPE):
            schema = self.content.get(content_type, {}).get("schema")
            if schema is not None:
                return schema
        return self.schema_


class ApiOperation(BaseModel):
    """A (path, method) pair with the attributes the diff looks at."""

    method: str  # lowercase verb
    path: str
    summary: str | None = None
    description: str | None = None
    parameters: list[Param] = Field(default_factory=list)
    responses: dict[str, ApiResponse] = Field(default_factory=dict)

    def required_params(self) -> set[tuple[str, str]]:
        return {p.key for p in self.parameters if p.required}

    def optional_param_count(self) -> int:
        return sum(1 for p in self.parameters if not p.required)


class ApiDocument(BaseModel):
    """A whole API description: ``paths`` maps path -> method -> operation.

    Both mappings keep the declaration order of the source document.
    """

    title: str | None = None
    version: str | None = None
    paths: dict[str, dict[str, ApiOperation]] = Field(default_factory=dict)

    @property
    def operation_count(self) -> int:
        return sum(len(methods) for methods in self.paths.values())
