import logging
import requests
from flask import current_app

from playerbook.utils.errors import GeocodeNotFound, GeocodingFailed

logger = logging.getLogger(__name__)


def get_coords_for_address(address):
    """
    Resolve an address to a ``{'lat': ..., 'lng': ...}`` pair with the Google
    Geocoding API.

    Raises GeocodeNotFound when the address has no match and GeocodingFailed
    when the service cannot be reached or answers with an error status.
    """
    api_key = current_app.config.get('GOOGLE_API_KEY')
    if not api_key:
        raise GeocodingFailed('Geocoding is not configured.')

    try:
        response = requests.get(
            current_app.config['GEOCODING_URL'],
            params={'address': address, 'key': api_key},
            timeout=current_app.config.get('GEOCODING_TIMEOUT', 10)
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Geocoding request failed: {str(e)}")
        raise GeocodingFailed()

    status = data.get('status') if data else None
    if not data or status == 'ZERO_RESULTS' or (status == 'OK' and not data.get('results')):
        raise GeocodeNotFound()

    if status != 'OK':
        logger.error(f"Geocoding returned status {status}: {data.get('error_message', '')}")
        raise GeocodingFailed()

    location = data['results'][0]['geometry']['location']
    return {'lat': location['lat'], 'lng': location['lng']}
