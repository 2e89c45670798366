#!/usr/bin/env python3
"""Simple example of editing a colored equation"""

from equation_colors import EquationEditSession, UnreadableTermError

# Open an equation the way a host editor would
session = EquationEditSession(
    r"F = \clr{mass}{m} \clr{accel}{a}",
    {"mass": "#3b82f6"},
    on_commit=lambda markup, colors: print(f"\nSaved: {markup} {colors}")
)

print(f"Found {len(session.terms)} colored terms:")
for term in session.terms:
    print(f"  {term.name}: {term.content} ({term.color})")

# Wrap the left-hand side in a new term
term = session.add_term(0, 1)
print(f"\nAdded {term.name} -> {session.markup}")

# Change a term from the structured view
session.update_term("accel", r"\ddot x", "#22c55e")

# Braced groups cannot be written into a term
try:
    session.update_term("accel", r"\ddot{x}", "#22c55e")
except UnreadableTermError as e:
    print(f"\nRejected: {e}")

print(f"\nPreview markup: {session.renderable()}")

for warning in session.diagnostics():
    print(f"Warning: {warning['message']}")

session.commit()
