"""Service layer — one method per overlay operation, each returning a ServiceResult."""
