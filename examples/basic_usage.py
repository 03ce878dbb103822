"""Basic statistics example using the built-in DI container."""

from statsburner.core.container import DIContainer
from statsburner.domain.models import DateType, ParametrizedDateSpec


def main() -> None:
    with DIContainer.create_client("milesj") as client:
        # Defaults to the past month.
        outcome = client.get_feed_data()
        print("Circulation:", outcome.result.total.circulation if outcome.result else None)

        outcome = client.get_feed_data(
            [
                # October 1st - November 1st 2010
                "2010-11-01",
                # February 26th 2011 only
                ParametrizedDateSpec(date="2011-02-26", type=DateType.DAY, offset=0),
                # April 1st - June 1st 2010
                ParametrizedDateSpec(date="2010-06-01", type=DateType.MONTH, offset=2),
            ]
        )
        for message in outcome.messages():
            print("Error:", message)
        if outcome.result:
            print("Dates:", ", ".join(outcome.result.dates))
            print("Average hits:", outcome.result.average.hits)


if __name__ == "__main__":
    main()
