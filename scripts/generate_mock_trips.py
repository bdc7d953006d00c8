import pandas as pd
import numpy as np
import uuid

def generate_mock_trips(num_trips=50, num_merchants=10, output_file="mock_trips.csv", seed=None):
    """
    Generates tracking scenarios for the driver simulation.
    Each row is an order with a pickup (where the driver is heading) and a dropoff
    (used to request the route polyline shown on the map).
    Pickups come from a fixed set of merchants so several trips share a target.
    """
    rng = np.random.default_rng(seed)

    # Center around Quebec City (the app's default location)
    CENTER_LAT = 46.8139
    CENTER_LON = -71.2082

    # 1. Generate fixed merchants (pickups)
    merchants = []
    for merchant_index in range(num_merchants):
        # Merchants placed within ~3km of the centre (roughly 0.03 degrees)
        merchants.append({
            "id": f"m_{str(uuid.uuid4())[:8]}",
            "name": f"Merchant {merchant_index+1}",
            "lat": CENTER_LAT + rng.uniform(-0.03, 0.03),
            "lon": CENTER_LON + rng.uniform(-0.03, 0.03),
        })

    # 2. Generate trips
    data = []
    for trip_index in range(num_trips):
        merchant = merchants[rng.integers(0, len(merchants))]

        # Dropoff within ~5km of the merchant
        dropoff_lat = merchant["lat"] + rng.uniform(-0.05, 0.05)
        dropoff_lon = merchant["lon"] + rng.uniform(-0.05, 0.05)

        data.append({
            "order_id": f"o_{str(trip_index+1).zfill(6)}",
            "merchant_id": merchant["id"],
            "pickup_lat": np.round(merchant["lat"], 6),
            "pickup_lon": np.round(merchant["lon"], 6),
            "dropoff_lat": np.round(dropoff_lat, 6),
            "dropoff_lon": np.round(dropoff_lon, 6),
            "vehicle": rng.choice(["motorcycle", "car"], p=[0.8, 0.2]),
            "pickup_address": merchant["name"],
        })

    # 3. Save to CSV
    df = pd.DataFrame(data)
    df.to_csv(output_file, index=False)
    print(f"✅ Generated {num_trips} trips and saved to '{output_file}'")

    print("\nTop 5 Merchants (shared pickup targets):")
    counts = df['pickup_address'].value_counts().head(5)
    for name, count in counts.items():
        print(f"  {name}: {count} trips")
    return df

if __name__ == "__main__":
    generate_mock_trips(num_trips=50, num_merchants=10)
