"""JSON Schema for fingerprint DSL definitions."""