# Installation script for CMR Transmit
############################################################
import json
import os

from setuptools import setup

# make sure not to overwrite an existing .cmrTransmitConfig with our example one
data_files = (
    [(os.path.expanduser("~"), ["cmrtransmit/.cmrTransmitConfig"])]
    if not os.path.exists(os.path.expanduser("~/.cmrTransmitConfig"))
    else []
)
# figure out the version
with open("cmrtransmit/cmrTransmit") as config:
    __version__ = json.load(config)["latestVersion"]

setup(data_files=data_files, version=__version__)
