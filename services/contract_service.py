# services/contract_service.py
"""
Lease contract generator.

Pure function: structured lease and party data in, contract HTML out. It
reads nothing from the database and has no side effects, so the same inputs
always give the same document (apart from the generation date line).
"""
from datetime import date
from decimal import Decimal
from html import escape
from typing import Optional

DOCUMENT_TYPE_LABELS = {
     "cc": "C.C.",
     "ce": "C.E.",
     "passport": "Passport",
}

GENERAL_CLAUSES = [
     "The tenant shall use the property exclusively as a dwelling.",
     "Subletting all or part of the property is forbidden.",
     "The tenant shall keep the property in good condition.",
     "Utilities are payable by the tenant.",
     "The landlord may visit the property with 24 hours notice.",
     "Early termination requires three (3) months notice.",
]


def format_money(amount, currency: str) -> str:
     value = Decimal(str(amount)).quantize(Decimal("1"))
     return f"{currency} {value:,}"


def _format_date(value: Optional[date]) -> str:
     if value is None:
          return "[To be defined]"
     return value.strftime("%B %d, %Y")


def _row(label: str, value) -> str:
     return f"<p><strong>{escape(label)}:</strong> {escape(str(value))}</p>"


def generate_lease_contract(property, landlord, tenant, tenant_profile, lease, today: Optional[date] = None) -> str:
     """
     Render the residential lease contract.

     Args:
          property: Property being leased
          landlord: User owning the property
          tenant: User applying for the lease
          tenant_profile: TenantProfile submitted at step 2
          lease: Lease carrying the economic snapshot
          today: generation date (defaults to the current date)

     Returns:
          Contract document as an HTML string
     """
     today = today or date.today()
     document_label = DOCUMENT_TYPE_LABELS.get(tenant_profile.document_type, tenant_profile.document_type)
     location = property.city + (f", {property.neighborhood}" if property.neighborhood else "")
     features = f"{property.bedrooms} bedrooms, {property.bathrooms} bathrooms"
     if property.area_sqm:
          features += f", {property.area_sqm} m2"

     parts = [
          '<div class="contract-container">',
          "<header><h1>RESIDENTIAL LEASE AGREEMENT</h1></header>",
          "<section><h2>PARTIES</h2>",
          "<h3>LANDLORD</h3>",
          _row("Name", landlord.name or "Not specified"),
          _row("Email", landlord.email),
          _row("Phone", landlord.phone or "Not specified"),
          "<h3>TENANT</h3>",
          _row("Name", tenant.name or "Not specified"),
          _row("Document", f"{document_label} {tenant_profile.document_number}"),
          _row("Email", tenant.email),
          _row("Occupation", tenant_profile.occupation),
          "</section>",
          "<section><h2>PROPERTY</h2>",
          _row("Property", property.title),
          _row("Address", property.address),
          _row("City", location),
          _row("Type", property.property_type),
          _row("Features", features),
          _row("Furnished", "Yes" if property.is_furnished else "No"),
          "</section>",
          "<section><h2>ECONOMIC TERMS</h2>",
          _row("Monthly rent", format_money(lease.monthly_rent, lease.currency)),
     ]
     if lease.deposit_amount:
          parts.append(_row("Security deposit", format_money(lease.deposit_amount, lease.currency)))
     parts += [
          "<p>Rent is payable within the first five (5) days of each month.</p>",
          "</section>",
          "<section><h2>TERM</h2>",
          _row("Start date", _format_date(lease.start_date)),
          _row("End date", _format_date(lease.end_date)),
          "<p>The initial term is twelve (12) months, renewable for equal periods.</p>",
          "</section>",
          "<section><h2>GENERAL CLAUSES</h2><ol>",
          *[f"<li>{escape(clause)}</li>" for clause in GENERAL_CLAUSES],
          "</ol></section>",
          "<section><h2>PERSONAL REFERENCE</h2>",
          _row("Name", tenant_profile.reference_name),
          _row("Phone", tenant_profile.reference_phone),
          _row("Relation", tenant_profile.reference_relation),
          "</section>",
          "<footer>",
          f"<p>Contract generated electronically on {escape(_format_date(today))}</p>",
          f"<p>Contract ID: {escape(lease.id)}</p>",
          "</footer>",
          "</div>",
     ]
     return "\n".join(parts)
