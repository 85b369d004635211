from fastapi import Request

from controllers.wave_hacks import PagedAggregateFetcher


def get_fetcher(request: Request) -> PagedAggregateFetcher:
    """Fetcher bound to the app's upstream client (created in the lifespan)."""
    return PagedAggregateFetcher(request.app.state.akindo_client)
