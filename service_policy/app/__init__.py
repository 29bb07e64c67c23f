"""
Policy Service application package.

Evaluates the two policies a cluster-coordination deployment relies on:

- acl: Which principals get which permissions on a coordination path.
- selectors: Host selector parsing, matching and logical equivalence.
- main: API surface for both evaluators and health.

Guidelines:
- Evaluators are pure and immutable after construction; share freely.
- Configuration errors (bad rule patterns, missing digests) fail at startup.
"""
