"""Operation-level comparison of two API documents.

Everything here is a pure function of the two documents: no I/O, no logging.
Records are emitted in the declaration order of the document being scanned.
"""

from api_change_detector.parser.base import ApiDocument, ApiOperation

from .models import BreakingChange, ChangeSet, ChangeType, ModifiedEndpoint, NewEndpoint, ParameterRef

NO_SUMMARY = "No summary"

SUMMARY_UPDATED = "Summary updated"
DESCRIPTION_UPDATED = "Description updated"
OPTIONAL_PARAMETERS_ADDED = "Optional parameters added"


def compare(old: ApiDocument | None, new: ApiDocument | None) -> ChangeSet:
    """Diff two documents. Either side missing means there is nothing to compare."""
    if old is None or new is None:
        return ChangeSet()

    return ChangeSet(
        breaking=detect_breaking_changes(old, new),
        new_endpoints=detect_new_endpoints(old, new),
        modified_endpoints=detect_modified_endpoints(old, new),
    )


def detect_new_endpoints(old: ApiDocument, new: ApiDocument) -> list[NewEndpoint]:
    result = []
    for path, methods in new.paths.items():
        old_methods = old.paths.get(path, {})
        for method, operation in methods.items():
            if method not in old_methods:
                result.append(
                    NewEndpoint(path=path, method=method.upper(), summary=operation.summary or NO_SUMMARY)
                )
    return result


def detect_breaking_changes(old: ApiDocument, new: ApiDocument) -> list[BreakingChange]:
    result = []
    for path, methods in old.paths.items():
        if path not in new.paths:
            for method in methods:
                result.append(
                    BreakingChange(
                        type=ChangeType.ENDPOINT_REMOVED,
                        path=path,
                        method=method.upper(),
                        description="Endpoint was removed",
                    )
                )
            continue

        for method, old_op in methods.items():
            new_op = new.paths[path].get(method)
            if new_op is None:
                result.append(
                    BreakingChange(
                        type=ChangeType.METHOD_REMOVED,
                        path=path,
                        method=method.upper(),
                        description="HTTP method was removed",
                    )
                )
                continue

            result.extend(_required_parameter_changes(old_op, new_op))
            result.extend(_response_schema_changes(old_op, new_op))
    return result


def detect_modified_endpoints(old: ApiDocument, new: ApiDocument) -> list[ModifiedEndpoint]:
    result = []
    for old_op, new_op in _matched_operations(old, new):
        changes = []
        if old_op.summary != new_op.summary:
            changes.append(SUMMARY_UPDATED)
        if old_op.description != new_op.description:
            changes.append(DESCRIPTION_UPDATED)
        if new_op.optional_param_count() > old_op.optional_param_count():
            changes.append(OPTIONAL_PARAMETERS_ADDED)

        if changes:
            result.append(ModifiedEndpoint(path=old_op.path, method=old_op.method.upper(), changes=changes))
    return result


def _matched_operations(old: ApiDocument, new: ApiDocument):
    for path, methods in old.paths.items():
        new_methods = new.paths.get(path)
        if new_methods is None:
            continue
        for method, old_op in methods.items():
            new_op = new_methods.get(method)
            if new_op is not None:
                yield old_op, new_op


def _required_parameter_changes(old_op: ApiOperation, new_op: ApiOperation) -> list[BreakingChange]:
    old_required = old_op.required_params()

    # Ordered de-duplication, so records follow the new document's parameter order.
    added = []
    for param in new_op.parameters:
        if param.required and param.key not in old_required and param.key not in added:
            added.append(param.key)

    return [
        BreakingChange(
            type=ChangeType.REQUIRED_PARAMETER_ADDED,
            path=new_op.path,
            method=new_op.method.upper(),
            parameter=ParameterRef(name=name, location=location),
            description=f"Required parameter added: {name} ({location})",
        )
        for location, name in added
    ]


def _response_schema_changes(old_op: ApiOperation, new_op: ApiOperation) -> list[BreakingChange]:
    result = []
    for status_code, old_resp in old_op.responses.items():
        new_resp = new_op.responses.get(status_code)
        if not status_code.startswith("2") or new_resp is None:
            continue
        if has_schema_breaking_changes(old_resp.extract_schema(), new_resp.extract_schema()):
            result.append(
                BreakingChange(
                    type=ChangeType.RESPONSE_SCHEMA_CHANGED,
                    path=old_op.path,
                    method=old_op.method.upper(),
                    status_code=status_code,
                    description=f"Response schema changed ({status_code})",
                )
            )
    return result


def has_schema_breaking_changes(old_schema: dict | None, new_schema: dict | None) -> bool:
    """Shallow check on top-level property names only.

    Nested objects, array items and $ref targets are not inspected.
    """
    if not isinstance(old_schema, dict) or not isinstance(new_schema, dict):
        return False

    old_props = _property_names(old_schema)
    new_props = _property_names(new_schema)
    old_required = _required_names(old_schema)
    new_required = _required_names(new_schema)

    return any(p not in new_required for p in old_required) or any(p not in new_props for p in old_props)


def _property_names(schema: dict) -> list[str]:
    props = schema.get("properties")
    return list(props) if isinstance(props, dict) else []


def _required_names(schema: dict) -> list:
    required = schema.get("required")
    return list(required) if isinstance(required, list) else []
