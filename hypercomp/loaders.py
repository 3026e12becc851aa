"""
Loaders: classes that provide name-based access to component documents, with optional caching
of post-processed documents (compiled templates) for isolated rendering.
"""

import os, time, threading

from .config import EXTENSIONS
from .errors import SourceError


########################################################################################################################################################
###
###  BASE LOADER
###

class Loader:
    """Base class for loaders: classes that provide name-based access to component documents, possibly with caching.
    The cached object does NOT have to be the original document. Rather, it can be any post-processed version of it,
    such that all post-processing is avoided altogether when only a cached version is available.
    """

    def canonical(self, name, rel = None):
        """Returns full canonical name of the document ('fullname'), as calculated from the (possibly relative) 'name' and 'rel'.
        All other loader's methods take canonical names as arguments.
        """
        return name

    def documents(self):
        """Canonical names of all component documents available through this loader, in a deterministic order."""
        raise NotImplementedError

    def docname(self, fullname):
        """Logical name of a document: base name with extension stripped."""
        base = os.path.basename(fullname)
        return os.path.splitext(base)[0]

    def load(self, fullname):
        """
        Loads a given document from its original location. Returns a pair: (text, metadata),
        where 'metadata' is any loader-specific object that keeps extra information about the document, as needed for cache management,
        and must be passed to subsequent cache() call when a post-processed object is going to be cached.
        """
        raise SourceError(f"document not found: {fullname}", fullname)

    def get(self, fullname):
        "Return a cached object for the document, or None if missing or outdated. No caching by default."
        return None

    def cache(self, fullname, obj, meta):
        "Store a post-processed object in cache for future use, together with metadata as returned by load(). No caching by default."

    def reset(self, fullname = None):
        "Clear the whole cache if fullname=None, or remove just the document 'fullname'."


class Cache:
    "The cache part of loaders implementation, inherited by subclasses. Thread-safe."

    cached = None           # the dictionary of all cached objects and their metadata: fullname -> (obj, meta)

    def __init__(self):
        self.cached = {}
        self._lock = threading.Lock()

    def get(self, fullname):
        with self._lock:
            if fullname not in self.cached: return None
            obj, meta = self.cached[fullname]
            if self.uptodate(fullname, meta):
                return obj
            del self.cached[fullname]                   # remove from cache to avoid repeated uptodate checks
            return None

    def cache(self, fullname, obj, meta):
        with self._lock:
            self.cached[fullname] = (obj, meta)

    def reset(self, fullname = None):
        with self._lock:
            if fullname is None:
                self.cached = {}
            else:
                self.cached.pop(fullname, None)

    def uptodate(self, fullname, meta):
        """A `virtual` method to be overriden in subclasses. Returns True if a given document in the cache is still up to date
        and can be safely returned by get() instead of loading it from the original location."""
        raise NotImplementedError()


########################################################################################################################################################
###
###  CUSTOM LOADERS
###

class DictLoader(Cache, Loader):
    "Loads documents stored in a dict of {filename: text}. For testing, or for documents embedded in application code."

    def __init__(self, documents = None, **kwargs):
        "The mapping can be passed as a dict and/or via keyword arguments."
        Cache.__init__(self)
        self.resources = dict(documents or {})
        self.resources.update(kwargs)

    def documents(self):
        return sorted(self.resources)

    def load(self, fullname):
        if fullname not in self.resources: raise SourceError(f"document not found: {fullname}", fullname)
        text = self.resources[fullname]
        return text, text                               # meta = text itself, to detect modifications

    def uptodate(self, fullname, meta):
        return self.resources.get(fullname) == meta


class FileLoader(Cache, Loader):
    """
    Loads documents from files. Component documents are discovered in a list of folders, `dirs`,
    non-recursively, by their extensions (see config.EXTENSIONS).
    """
    encoding = 'utf-8'

    root = None             # optional default 'rel' for computing canonical names in canonical(), when no other 'rel' is given
    dirs = ()               # folders to be scanned by documents()

    def __init__(self, *dirs, encoding = None):
        Cache.__init__(self)
        self.dirs = dirs
        if dirs:
            root = str(dirs[0])
            if root[-1] != os.sep:                  # add trailing '/' to 'root', so that it's treated as a folder name, not file name
                root += os.sep
            self.root = root
        if encoding: self.encoding = encoding

    def canonical(self, name, rel = None):
        """
        Compute the filesystem-canonical (normalized & absolute) path of the document.
        'rel': optional name of a file to be used as a reference (file in the `current folder`) for resolution of relative paths;
        only used when 'name' is a relative path, for absolute 'name' paths 'rel' has no effect.
        If 'rel' is needed but missing, self.root is used as a fallback.
        """
        name = str(name)
        if not os.path.isabs(name):
            path = os.path.dirname(rel or self.root or '')
            name = os.path.join(path, name)
        return os.path.realpath(name)

    def documents(self):
        docs = []
        for folder in self.dirs:
            try:
                files = sorted(os.listdir(folder))
            except OSError as ex:
                raise SourceError(f"error reading directory {folder}: {ex}", str(folder)) from ex

            for filename in files:
                path = os.path.join(folder, filename)
                if os.path.isdir(path) or os.path.splitext(filename)[1] not in EXTENSIONS: continue
                docs.append(self.canonical(path))
        return docs

    def load(self, fullname):
        # To detect changes to the file on disk, we keep the current Unix time, time.time(),
        # and compare it later on with the file modification time returned by getmtime().
        meta = time.time()
        try:
            with open(fullname, encoding = self.encoding) as f:
                doc = f.read()
        except OSError as ex:
            raise SourceError(f"error reading template file {fullname}: {ex}", fullname) from ex
        return doc, meta

    def uptodate(self, fullname, meta):
        "Checks if the document has changed on disk after it was loaded."
        try:
            return os.path.getmtime(fullname) <= meta
        except OSError:                                 # the file is missing? must refresh
            return False
