import threading


#####################################################################################################################################################
#####
#####  REGISTRY
#####

class Registry:
    """
    Registry of compiled components and the page shell.

    The registry is populated during a bulk-load phase, possibly from multiple threads, and is only read afterwards,
    during rendering. Registration is guarded by a lock; reads are not, so loading must be complete
    before the first render begins. Registering a component under an existing name replaces the previous one.
    """

    components = None           # {name: Component}, in order of registration
    shell      = None           # the page Shell, or None if not set yet

    def __init__(self):
        self.components = {}
        self._lock = threading.Lock()

    def register(self, component):
        with self._lock:
            self.components[component.name] = component

    def lookup(self, name):
        """Component registered under `name`, or None."""
        return self.components.get(name)

    def set_shell(self, shell):
        with self._lock:
            self.shell = shell

    def names(self):
        return list(self.components)

    def __contains__(self, name):
        return name in self.components

    def __len__(self):
        return len(self.components)

    def closure(self, names):
        """
        Names of components reachable from `names` through static references (Component.refs), `names` included,
        in breadth-first order. Unregistered names are kept, but not followed.
        """
        found = list(dict.fromkeys(names))
        for name in found:
            component = self.lookup(name)
            if component is None: continue
            for ref in component.refs:
                if ref not in found: found.append(ref)
        return found

    def aggregate(self, names):
        """
        Concatenate styles and scripts of components with given `names`, in the same order as `names`.
        Return a pair of strings (css, js). Names that are not registered are skipped.
        """
        css, js = [], []
        for name in names:
            component = self.lookup(name)
            if component is None: continue
            if component.style:  css.append(component.style + '\n')
            if component.script: js.append(component.script + '\n')
        return ''.join(css), ''.join(js)
