from tqdm import tqdm


class ProgressBar:
    """Output function showing the integration progress with `tqdm`.

    Pass an instance as `output_fcn`. Keyword arguments are forwarded to
    `tqdm`. Setting `stop` to True (e.g. from another output function or a
    callback) makes the integration end after the current step.

    Examples
    --------
    >>> sol = integrate(fun, (0, 10), y0, output_fcn=ProgressBar(desc="BDF"))
    """
    def __init__(self, **tqdm_kwargs):
        self.tqdm_kwargs = tqdm_kwargs
        self.stop = False
        self._bar = None
        self._t = None

    def __call__(self, t, y, flag):
        if flag == "init":
            t0, t_final = t
            self.stop = False
            self._t = t0
            self._bar = tqdm(total=t_final - t0, unit="s", **self.tqdm_kwargs)
        elif flag == "step":
            self._bar.update(t - self._t)
            self._t = t
            self._bar.set_postfix(t=f"{t:.4g}")
        elif flag == "done":
            if self._bar is not None:
                self._bar.close()
                self._bar = None
        else:
            raise ValueError(f"Unrecognized flag {flag!r}.")
        return self.stop
