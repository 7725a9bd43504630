from collection_sync.storage.chunked import ChunkedStore, PluginDataStore, chunk_key

__all__ = ["ChunkedStore", "PluginDataStore", "chunk_key"]
