import logging

import config
from identity_store import IdentityStore
from posts_store import PostsStore
from substrate import FileSubstrate, MemorySubstrate


class Services:
    def __init__(self, substrate, identity, posts):
        self.substrate = substrate
        self.identity = identity
        self.posts = posts


def create_services(data_dir=None, quota_bytes=None, in_memory=False):
    """
    Builds the substrate and both stores once at application start.
    The stores share one substrate but never read each other's keys.
    """
    if in_memory:
        substrate = MemorySubstrate(quota_bytes=quota_bytes)
    else:
        data_dir = data_dir or config.get_data_dir()
        if quota_bytes is None:
            quota_bytes = config.get_quota_bytes()
        substrate = FileSubstrate(data_dir, quota_bytes=quota_bytes)
        logging.info(f"Using data directory {data_dir}")

    return Services(substrate, IdentityStore(substrate), PostsStore(substrate))
