"""
Oral morphine equivalent (OMEQ) calculation for opioid medications.
"""
