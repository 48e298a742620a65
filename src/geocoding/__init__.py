"""
Geocoding Module
--------------
Resolves Brazilian postal codes (CEP) into addresses and geographic coordinates.
Uses ViaCEP for the address, then Geoapify and OpenStreetMap's Nominatim API as a
fallback cascade with rate limiting.
"""
