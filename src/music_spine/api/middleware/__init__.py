"""API middleware package: request correlation and error mapping."""
