"""
Sign in to ArcGIS and search your portal for web maps.

You'll need to set the ARCGIS_USERNAME and ARCGIS_PASSWORD environment
variables. Set ARCGIS_PORTAL to use an ArcGIS Enterprise portal instead of
ArcGIS Online.
"""

import asyncio
import logging
import os

from dotenv import load_dotenv

from arcgis_rest.auth.identity_manager import ArcGISIdentityManager
from arcgis_rest.auth.models.flow import DEFAULT_PORTAL
from arcgis_rest.portal.search import search_items


async def main():
    manager = await ArcGISIdentityManager.sign_in(
        os.getenv("ARCGIS_USERNAME"),
        os.getenv("ARCGIS_PASSWORD"),
        portal=os.getenv("ARCGIS_PORTAL", DEFAULT_PORTAL),
    )
    logging.info(f"Signed in as {await manager.get_username()}")

    try:
        response = await search_items(
            manager.transport,
            {"q": 'type:"Web Map"', "num": 10, "sortField": "modified"},
            authentication=manager,
        )
        for item in response["results"]:
            print(f"{item['id']}  {item['title']}")
    finally:
        await manager.close()


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
