"""
DoctorWeb Backend - Services Layer
====================================

Service Inventory:
    - DocumentStore:  Reads and writes the JSON collection files (CRUD, snapshot)
    - ContentService: Typed accessors over the store, one per collection
"""
