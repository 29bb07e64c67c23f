"""
ACL package.

Decides which principals get which permissions on a coordination tree node.

Modules of interest:
- models: Permission bits, identities, ACL entries and rules.
- resolver: Rule-based resolution with union semantics and a default ACL.
- providers: The master/agent cluster policy.
- paths: Coordination tree path layout used to write rule patterns.
"""
