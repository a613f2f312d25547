import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, HTTPException

from channelbus.models import ChannelRegistry, default_channel_map
from channelbus.utilities.utility_functions import make_channel_info, make_channel_stats, make_health

logger = logging.getLogger(__name__)


def create_app(registry: Optional[ChannelRegistry] = None) -> FastAPI:
    '''Read-mostly HTTP view over the channels of ``registry``.

    Without a registry the app looks at the process-wide default map. It never
    constructs a registry itself, so mounting it cannot pin the config of the
    shared ``"default"`` channel.
    '''
    channels = registry.backing_map if registry is not None else default_channel_map()
    app = FastAPI(title="In-process channel bus")
    started_at = datetime.now(timezone.utc)

    @app.get("/health")
    def rest_health():
        items = channels.items()
        subscribers = sum(s.get_observer_count() for _, s in items)
        return make_health(started_at, len(items), subscribers)

    @app.get("/channels")
    def rest_list_channels():
        return {"channels": [make_channel_info(name, s) for name, s in sorted(channels.items())]}

    @app.get("/stats")
    def rest_stats():
        return {"channels": {name: make_channel_stats(s) for name, s in channels.items()}}

    @app.delete("/channels/{name}/buffer")
    def rest_clear_buffer(name: str):
        stream = channels.get(name)
        if stream is None:
            raise HTTPException(status_code=404, detail="not found")
        stream.clear_buffer()
        logger.info("buffer of channel %r cleared over HTTP", name)
        return {"status": "cleared", "channel": name}

    return app


app = create_app()
