"""Mapped classes imported by CLI tests through ``module:Class`` targets."""

from __future__ import annotations

from docmapper.document import Document, EmbeddedDocument, embeds_many
from docmapper.schema import key


class Address(EmbeddedDocument):
    city = key(str)


class Customer(Document):
    name = key(str, required=True, length=20)
    email = key(str, format=r".+@.+", index=True)
    addresses = embeds_many(Address)


class VipCustomer(Customer):
    tier = key(int, numeric=True)


class Plain(Document):
    note = key(str)


NOT_A_CLASS = "customer"
