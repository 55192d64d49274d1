"""
OwlDoor CRM - Match model (client <-> pro pairing)

Contact fields are only returned to the client once `purchased` is true.
"""


# Snapshot fields hidden from the client until purchase
MATCH_CONTACT_FIELDS = ["email", "phone", "pro_email", "pro_phone"]
