"""
Permit application routes and the schema each one validates against.

References point into the JSON documents under the schema directory
(``<file>#<schema name>``).
"""

APPLICATION_ROUTES: dict[str, str] = {
    "noncommercial": "validation.json#noncommercialApplication",
    "temp-outfitters": "validation.json#tempOutfitterApplication",
}
