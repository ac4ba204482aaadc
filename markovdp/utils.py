class dotdict(dict):
    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None


solver_defaults = dotdict({
    'discount': 0.95,
    'tolerance': 1e-5,
    'max_iterations': 1000,
})
