from logistics.lifecycle.statuses import ShipmentStatus

STATUS_LABELS = {
    ShipmentStatus.DRAFT: "Draft",
    ShipmentStatus.PENDING_APPROVAL: "Awaiting approval",
    ShipmentStatus.APPROVED: "Approved",
    ShipmentStatus.PICKED_UP: "Picked up",
    ShipmentStatus.IN_TRANSIT: "In transit",
    ShipmentStatus.AT_CUSTOMS: "At customs",
    ShipmentStatus.CUSTOMS_CLEARED: "Cleared customs",
    ShipmentStatus.OUT_FOR_DELIVERY: "Out for delivery",
    ShipmentStatus.READY_FOR_PICKUP: "Ready for pickup",
    ShipmentStatus.DELIVERED: "Delivered",
    ShipmentStatus.CANCELLED: "Cancelled",
    ShipmentStatus.ON_HOLD: "On hold",
    ShipmentStatus.EXCEPTION: "Exception",
}


def status_label(status: ShipmentStatus | str) -> str:
    if not isinstance(status, ShipmentStatus):
        try:
            status = ShipmentStatus(status)
        except ValueError:
            return str(status)
    return STATUS_LABELS[status]
