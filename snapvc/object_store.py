"""Content-addressable storage for blobs and commits."""

from .errors import AmbiguousDigest, CommitNotFound, ObjectNotFound
from .kv.base import KVStore
from .log import get_logger
from .objects import DIGEST_LENGTH, Blob, Commit

COMMIT_KEY = "objects/commits/%s"
BLOB_KEY = "objects/blobs/%s"

logger = get_logger(__name__)


class ObjectStore:
    """Append-only object store over a KV store.

    Every object is stored under the digest of its canonical form and
    is never rewritten once present.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    def put(self, obj: Blob | Commit) -> str:
        """Store a blob or commit and return its digest.

        Storing an object that is already present is a no-op.
        """
        digest = obj.digest
        key = (COMMIT_KEY if isinstance(obj, Commit) else BLOB_KEY) % digest
        if key not in self.store:
            self.store.set(key, obj.to_bytes())
            logger.debug("object.stored", kind=type(obj).__name__.lower(), digest=digest)
        return digest

    def get_commit(self, digest: str | None) -> Commit:
        """Load a commit, raising ``CommitNotFound`` if it is absent."""
        raw = self.store.get(COMMIT_KEY % digest) if digest else None
        if raw is None:
            raise CommitNotFound()
        return Commit.from_bytes(raw)

    def get_blob(self, digest: str) -> Blob:
        """Load a blob, raising ``ObjectNotFound`` if it is absent."""
        raw = self.store.get(BLOB_KEY % digest)
        if raw is None:
            raise ObjectNotFound(f"No blob with id {digest} exists.")
        return Blob.from_bytes(raw)

    def has_commit(self, digest: str) -> bool:
        return COMMIT_KEY % digest in self.store

    def has_blob(self, digest: str) -> bool:
        return BLOB_KEY % digest in self.store

    def commits(self) -> list[str]:
        """All stored commit digests, sorted."""
        return self._digests(COMMIT_KEY)

    def blobs(self) -> list[str]:
        """All stored blob digests, sorted."""
        return self._digests(BLOB_KEY)

    def resolve(self, prefix: str) -> str:
        """Expand a possibly abbreviated commit digest.

        Raises:
            CommitNotFound: No stored commit starts with ``prefix``.
            AmbiguousDigest: More than one stored commit does.
        """
        prefix = prefix.lower()
        if len(prefix) == DIGEST_LENGTH:
            if not self.has_commit(prefix):
                raise CommitNotFound()
            return prefix
        if not prefix:
            raise CommitNotFound()
        matches = [d for d in self.commits() if d.startswith(prefix)]
        if not matches:
            raise CommitNotFound()
        if len(matches) > 1:
            raise AmbiguousDigest(prefix, matches)
        return matches[0]

    # -- Raw access for copying between repositories --

    def get_raw_commit(self, digest: str) -> bytes:
        raw = self.store.get(COMMIT_KEY % digest)
        if raw is None:
            raise CommitNotFound()
        return raw

    def get_raw_blob(self, digest: str) -> bytes:
        raw = self.store.get(BLOB_KEY % digest)
        if raw is None:
            raise ObjectNotFound(f"No blob with id {digest} exists.")
        return raw

    def put_raw_commit(self, digest: str, raw: bytes) -> None:
        self.store.set(COMMIT_KEY % digest, raw)

    def put_raw_blob(self, digest: str, raw: bytes) -> None:
        self.store.set(BLOB_KEY % digest, raw)

    def _digests(self, template: str) -> list[str]:
        prefix = template.replace("%s", "")
        return sorted(key[len(prefix):] for key in self.store.keys(prefix))
