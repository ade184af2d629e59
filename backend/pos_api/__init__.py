"""POS order engine REST API."""
