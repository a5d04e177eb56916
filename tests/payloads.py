"""Canned bodies served by the mocked transport."""

RESPONSE_BODY = {"id": "testId", "name": "Foobar"}
ERROR_BODY = {"status": 400, "errors": ["error"]}
