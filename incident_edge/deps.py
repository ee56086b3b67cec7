# ================================
# FILE: incident_edge/deps.py
# ================================
from fastapi import Request

# Collaborators are built once in create_app() and parked on app.state.

def get_store(request: Request):
    return request.app.state.store

def get_storage(request: Request):
    return request.app.state.storage

def get_geocoder(request: Request):
    return request.app.state.geocoder

def get_hasher(request: Request):
    return request.app.state.hasher
