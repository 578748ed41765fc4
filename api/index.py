import logging

from mangum import Mangum

from settlement.api import app
from settlement.config import LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL)

app.root_path = "/api"

handler = Mangum(app)
