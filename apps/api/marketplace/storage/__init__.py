from marketplace.storage.blob_store import Blob, BlobStore, LocalBlobStore, StagedBlobs  # noqa: F401
