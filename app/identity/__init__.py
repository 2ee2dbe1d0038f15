"""Identity reconciliation package.

Links contact observations that share an email address or a phone number
into identities (one primary contact plus its secondaries), merges
identities when an observation bridges them, and renders the consolidated
view returned by ``POST /identify``.
"""
