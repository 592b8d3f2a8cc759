import logging

_FMT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO"):
    levelno = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(level=levelno, format=_FMT)
    # asyncio chatter is noise at INFO for a short-lived CLI run
    logging.getLogger("asyncio").setLevel(max(levelno, logging.WARNING))
