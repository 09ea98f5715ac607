import logging
from typing import Optional

import uvicorn

from sitemapcrawl.api.server import create_app
from sitemapcrawl.container import Container

logger = logging.getLogger(__name__)


def main(container: Optional[Container] = None):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    container = container or Container()
    app = create_app(container)

    host = container.config.HOST()
    port = int(container.config.PORT())
    logger.info("Sitemap API listening on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == '__main__':
    main()
