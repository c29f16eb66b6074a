import torch.nn as nn


class LSTMForecaster(nn.Module):
    def __init__(self, input_dim=1, hidden_dim=8, num_layers=1, dropout=0.0):
        super().__init__()
        self.lstm = nn.LSTM(
            input_size=input_dim,
            hidden_size=hidden_dim,
            num_layers=num_layers,
            dropout=dropout if num_layers > 1 else 0.0,
            batch_first=True
        )
        self.fc = nn.Linear(hidden_dim, 1)

    def forward(self, x):
        """
        x: (B, W, F)
        returns: (B,) next normalized value
        """
        out, _ = self.lstm(x)           # (B, W, H)
        last = out[:, -1, :]            # (B, H)
        out = self.fc(last)             # (B, 1)
        return out.squeeze(-1)


class SimpleForecaster(nn.Module):
    """Tiny sigmoid MLP mapping one normalized value to the next."""

    def __init__(self, hidden_layers=(10, 8)):
        super().__init__()
        layers = []
        width = 1
        for h in hidden_layers:
            layers += [nn.Linear(width, h), nn.Sigmoid()]
            width = h
        layers += [nn.Linear(width, 1), nn.Sigmoid()]
        self.net = nn.Sequential(*layers)

    def forward(self, x):
        """
        x: (B, 1)
        returns: (B,)
        """
        return self.net(x).squeeze(-1)
