from markovdp.TableModel import TableModel


class RecyclingRobotMDP(TableModel):
    """
    Recycling robot from Sutton and Barto (example 3.3).

    The battery is 'high' or 'low'. Searching from high leaves it high with
    probability alpha; searching from low leaves it low with probability beta,
    otherwise the battery runs flat and the robot is rescued (r_rescue) and
    recharged. Waiting never changes the battery; recharging is only
    available when low.
    """

    def __init__(self, alpha=0.1, beta=0.1, r_search=2.0, r_wait=1.0, r_rescue=-3.0):
        self.alpha = alpha
        self.beta = beta
        self.r_search = r_search
        self.r_wait = r_wait
        self.r_rescue = r_rescue
        super().__init__(self.records_for(alpha, beta, r_search, r_wait, r_rescue))

    @staticmethod
    def records_for(alpha, beta, r_search, r_wait, r_rescue):
        return [
            ('high', 'search', 'high', alpha, r_search),
            ('high', 'search', 'low', 1 - alpha, r_search),
            ('high', 'wait', 'high', 1.0, r_wait),
            ('low', 'search', 'high', 1 - beta, r_rescue),
            ('low', 'search', 'low', beta, r_search),
            ('low', 'wait', 'low', 1.0, r_wait),
            ('low', 'recharge', 'high', 1.0, 0.0),
        ]
